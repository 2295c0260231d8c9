"""
Network download with progress reporting and atomic persistence.

Downloads are streamed into a ``tmp-`` file created next to the destination
and renamed over it once complete, so a partially written file is never
visible at the destination path. Failed downloads leave no temp file behind.

There is no retry loop; retry policy belongs to the caller.
"""

import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import requests
from requests.exceptions import RequestException

from dockerkit.core.exceptions import FilesystemError, TransportError

logger = logging.getLogger(__name__)

TEMP_PREFIX = "tmp-"
CHUNK_SIZE = 64 * 1024


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def download_file(
    url: str,
    destination: Union[str, Path],
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: Optional[float] = None,
) -> Path:
    """
    Download a URL and atomically place the body at ``destination``.

    Args:
        url: URL to download from
        destination: Final path of the downloaded file
        progress_callback: Optional callback for progress updates
        timeout: Optional request timeout in seconds (no timeout by default)

    Returns:
        Path to downloaded file

    Raises:
        TransportError: If the request fails or returns an error status
        FilesystemError: If the temp file cannot be created or renamed
        ValueError: If URL or destination is empty

    Example:
        >>> download_file(
        ...     "https://get.docker.com/builds/Linux/x86_64/docker-1.10.3",
        ...     Path("~/.dockerkit/builds/1.10.3"),
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_name = tempfile.mkstemp(
            dir=destination.parent, prefix=TEMP_PREFIX
        )
    except OSError as e:
        raise FilesystemError(
            f"Cannot create temp file in {destination.parent}: {e}"
        ) from e
    temp_path = Path(temp_name)

    try:
        with open(temp_fd, "wb") as f:
            _stream_to_file(url, f, progress_callback, timeout)

        try:
            os.replace(temp_path, destination)
        except OSError as e:
            raise FilesystemError(
                f"Failed to move {temp_path} to {destination}: {e}"
            ) from e
    except BaseException:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as cleanup_error:
            logger.warning(f"Error cleaning up temp file {temp_path}: {cleanup_error}")
        raise

    logger.info(f"Download complete: {destination}")
    return destination


def _stream_to_file(
    url: str,
    f,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: Optional[float],
) -> int:
    """
    Stream the response body of ``url`` into an open binary file.

    Returns:
        Number of bytes written

    Raises:
        TransportError: If the request fails or returns an error status
    """
    logger.info(f"Downloading from {url}")

    try:
        response = requests.get(url, stream=True, timeout=timeout, allow_redirects=True)
    except RequestException as e:
        raise TransportError(f"Request to {url} failed: {e}") from e

    with response:
        if response.status_code >= 400:
            raise TransportError(
                f"Download of {url} failed with HTTP {response.status_code}"
            )

        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)

                # Report progress at most once per 0.5 seconds
                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= 0.5
                    or downloaded == total_size
                ):
                    elapsed = current_time - start_time
                    speed = downloaded / elapsed if elapsed > 0 else 0
                    remaining = total_size - downloaded if total_size > 0 else 0
                    eta = remaining / speed if speed > 0 else 0

                    progress_callback(
                        DownloadProgress(
                            bytes_downloaded=downloaded,
                            total_bytes=total_size if total_size > 0 else downloaded,
                            percentage=(downloaded / total_size * 100)
                            if total_size > 0
                            else 0,
                            speed_bps=speed,
                            eta_seconds=eta,
                        )
                    )
                    last_progress_time = current_time
        except RequestException as e:
            raise TransportError(f"Error reading response from {url}: {e}") from e

    logger.debug(f"Received {downloaded} bytes from {url}")
    return downloaded


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        return f"{mb_downloaded:.1f} MB " f"at {speed_mbps:.1f} MB/s"
