"""End-to-end pipeline for cloning a book."""

from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]
