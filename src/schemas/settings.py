"""Run settings for a clone."""

from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36"
)

A4_PORTRAIT_MM = (210.0, 297.0)


class CloneSettings(BaseModel):
    """Immutable configuration for one clone run.

    Attributes:
        storage_root: Directory holding one image directory per book
        output_dir: Directory the assembled PDF is written to
        max_workers: Number of concurrent page downloads
        probe_timeout: Timeout in seconds for page probes
        fetch_timeout: Timeout in seconds for page downloads
        user_agent: User-Agent header sent with every request
        max_probe_page: Upper bound for page range detection
        strict: Fail the run if any page fails to download
        progress_interval: Log download progress every N completed pages
        page_size_mm: Output page size (width, height) in millimetres
    """

    storage_root: Path = Path("images")
    output_dir: Path = Path(".")
    max_workers: int = Field(default=10, ge=1)
    probe_timeout: float = Field(default=5.0, gt=0)
    fetch_timeout: float = Field(default=30.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    max_probe_page: int = Field(default=10000, ge=1)
    strict: bool = False
    progress_interval: int = Field(default=10, ge=1)
    page_size_mm: tuple[float, float] = A4_PORTRAIT_MM

    model_config = {"frozen": True}

    def client_config(self) -> dict:
        """Build the HTTP client config dict for these settings."""
        return {
            "user_agent": self.user_agent,
            "probe_timeout": self.probe_timeout,
            "fetch_timeout": self.fetch_timeout,
        }
