"""
File system utilities for dockerkit.

This module provides the file operations the build cache is built on:
- File copy with ancestor creation and explicit permission bits
- Tar archive extraction with path validation
- Scoped temporary directories that are always removed
- Safe directory removal and in-place truncation
"""

import logging
import os
import shutil
import sys
import tarfile
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Union

from dockerkit.core.exceptions import (
    ArchiveError,
    CopyStreamError,
    DestinationError,
    FilesystemError,
    InsecureArchiveError,
    SourceNotFoundError,
)

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Args:
        path: Path to check
        parent: Parent directory

    Returns:
        True if path is under parent directory

    Example:
        >>> is_relative_to(Path("/home/user/.bin/docker"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Copying
# ============================================================================


def copy_file(
    source: Union[str, Path], dest: Union[str, Path], mode: int = 0o755
) -> Path:
    """
    Copy the source file into the destination file.

    Missing parent directories of the destination are created. The destination
    is truncated if it exists, otherwise created with the given permission bits.
    Copying a file onto itself leaves it untouched.

    Args:
        source: File to copy
        dest: Destination file path
        mode: Permission bits used when the destination is created

    Returns:
        Destination path

    Raises:
        SourceNotFoundError: If the source file does not exist
        DestinationError: If the destination cannot be created or opened
        CopyStreamError: If reading or writing fails during the copy

    Example:
        >>> copy_file('bundles/1.10.0/binary/docker-1.10.0', '/home/me/.bin/docker')
    """
    source = Path(source)
    dest = Path(dest)

    if not source.exists():
        raise SourceNotFoundError(f"Source file not found at {str(source)!r}")

    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DestinationError(
            f"Error creating directory for {str(dest)!r}: {e}"
        ) from e

    if dest.exists() and os.path.samefile(source, dest):
        logger.debug(f"{source} and {dest} are the same file")
        return dest

    try:
        fd = os.open(dest, os.O_TRUNC | os.O_CREAT | os.O_WRONLY, mode)
    except OSError as e:
        raise DestinationError(f"Error opening target file {str(dest)!r}: {e}") from e

    with open(fd, "wb") as out:
        try:
            src = open(source, "rb")
        except OSError as e:
            raise CopyStreamError(
                f"Error opening source file {str(source)!r}: {e}"
            ) from e
        with src:
            try:
                shutil.copyfileobj(src, out, COPY_CHUNK_SIZE)
            except OSError as e:
                raise CopyStreamError(
                    f"Error copying {str(source)!r} to {str(dest)!r}: {e}"
                ) from e

    logger.debug(f"Copied {source} to {dest}")
    return dest


def truncate_file(path: Union[str, Path]) -> None:
    """
    Truncate an existing file to zero length without removing it.

    Write access to the file is enough; the containing directory is not touched.

    Raises:
        FilesystemError: If the file cannot be opened for writing
    """
    try:
        with open(path, "r+b") as f:
            f.truncate(0)
    except OSError as e:
        raise FilesystemError(f"Failed to truncate {path}: {e}") from e


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Prevents directory traversal attacks (e.g., paths containing '../').

    Args:
        path: Member path from archive
        destination: Extraction destination

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
) -> None:
    """
    Extract a tar archive to a destination directory.

    Compression (gzip, bzip2, xz or none) is detected from the content, since
    cache entries are named by version and carry no file extension.
    All member paths are validated before anything is written.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to

    Raises:
        ArchiveError: If the archive is missing, unreadable or corrupt
        InsecureArchiveError: If the archive contains malicious paths

    Example:
        >>> extract_archive('~/.dockerkit/builds/17.03.0-ce', '/tmp/scratch')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive_path, "r:*") as tar:
            for member in tar.getmembers():
                _validate_archive_path(member.name, destination)

            if sys.version_info >= (3, 12):
                tar.extractall(destination, filter="data")
            else:
                tar.extractall(destination)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ArchiveError(f"Failed to extract {archive_path}: {e}") from e


# ============================================================================
# Directory Management
# ============================================================================


def safe_rmtree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree; a missing path is ignored.

    Args:
        path: Directory to remove

    Raises:
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


@contextmanager
def temporary_directory(prefix: str = "dockerkit_"):
    """
    Context manager for temporary directory with automatic cleanup.

    The directory is removed when the block exits, whether it raised or not.

    Args:
        prefix: Prefix for temp directory name

    Yields:
        Path to temporary directory

    Example:
        >>> with temporary_directory() as tmp:
        ...     extract_archive(cached, tmp)
    """
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix))

    try:
        yield temp_dir
    finally:
        if temp_dir.exists():
            safe_rmtree(temp_dir)


__all__ = [
    "is_relative_to",
    "copy_file",
    "truncate_file",
    "extract_archive",
    "safe_rmtree",
    "temporary_directory",
]
