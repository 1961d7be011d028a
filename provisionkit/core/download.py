"""
HTTPS downloads with progress reporting and retry logic.

Used to fetch the toolchain-manager bootstrap script when neither wget nor
curl is available. Only https:// URLs are accepted, and TLS certificates
are always verified.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


class DownloadError(Exception):
    """Exception raised when download fails."""

    pass


def download_file(
    url: str,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: int = 30,
    max_retries: int = 3,
    sleep: Callable[[float], None] = time.sleep,
) -> Path:
    """
    Download file from URL to destination with retry logic.

    Args:
        url: https:// URL to download from
        destination: Local path to save file
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts
        sleep: Delay function between attempts

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ValueError: If URL is empty or not https
    """
    if not url:
        raise ValueError("URL cannot be empty")
    if urlparse(url).scheme != "https":
        raise ValueError(f"Refusing non-HTTPS download: {url}")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    for attempt in range(max_retries):
        try:
            return _download_with_progress(url, destination, progress_callback, timeout)
        except RequestException as e:
            if attempt == max_retries - 1:
                raise DownloadError(
                    f"Download failed after {max_retries} attempts: {e}"
                ) from e

            # Exponential backoff
            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            sleep(backoff_seconds)

    raise DownloadError("Download failed for unknown reason")


def _download_with_progress(
    url: str,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
) -> Path:
    """Stream url into destination, reporting progress."""
    logger.info(f"Downloading from {url}")

    response = requests.get(url, stream=True, timeout=timeout, allow_redirects=True)
    response.raise_for_status()

    content_length = response.headers.get("content-length")
    total_size = int(content_length) if content_length else 0

    downloaded = 0
    start_time = time.time()

    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=8192):
            if not chunk:
                continue
            f.write(chunk)
            downloaded += len(chunk)

            if progress_callback:
                elapsed = time.time() - start_time
                progress_callback(
                    DownloadProgress(
                        bytes_downloaded=downloaded,
                        total_bytes=total_size if total_size > 0 else downloaded,
                        percentage=(downloaded / total_size * 100)
                        if total_size > 0
                        else 0,
                        speed_bps=downloaded / elapsed if elapsed > 0 else 0,
                    )
                )

    logger.info(f"Download complete: {destination}")
    return destination


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> format_progress(DownloadProgress(10240, 20480, 50.0, 1024))
        '10.0/20.0 KB (50.0%) at 1.0 KB/s'
    """
    kb_downloaded = progress.bytes_downloaded / 1024
    kb_total = progress.total_bytes / 1024
    speed_kbps = progress.speed_bps / 1024

    if progress.percentage > 0:
        return (
            f"{kb_downloaded:.1f}/{kb_total:.1f} KB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_kbps:.1f} KB/s"
        )
    return f"{kb_downloaded:.1f} KB at {speed_kbps:.1f} KB/s"
