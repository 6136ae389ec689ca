"""HTTP client for page probes and downloads."""

from .client import BookClient
from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
)

__all__ = [
    "BookClient",
    "ClientError",
    "ConnectionError",
    "APIError",
    "NotFoundError",
]
