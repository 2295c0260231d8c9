"""
Checksum computation and verification for build artifacts.

This module provides:
- SHA256 digests of files, read in chunks
- Parsing of ``.sha256`` sidecar files written next to bundle binaries
- Timing-attack resistant digest comparison
"""

import binascii
import hashlib
import logging
import secrets
from pathlib import Path
from typing import Union

from dockerkit.core.exceptions import HashFormatError, HashMismatch

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = ".sha256"


def compute_file_hash(file_path: Union[str, Path]) -> str:
    """
    Compute the SHA256 digest of a file.

    Args:
        file_path: Path to file

    Returns:
        Hex string of hash

    Raises:
        FileNotFoundError: If file doesn't exist

    Example:
        >>> compute_file_hash(Path('~/.dockerkit/builds/1.10.3'))
        'b3f5...'
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest()


def read_checksum_sidecar(sidecar_path: Union[str, Path]) -> bytes:
    """
    Read the digest recorded in a checksum sidecar file.

    Sidecars hold ``<hex digest> <filename>``; only the token before the
    first space is used.

    Args:
        sidecar_path: Path to the ``.sha256`` file

    Returns:
        Raw digest bytes

    Raises:
        FileNotFoundError: If the sidecar does not exist
        HashFormatError: If the recorded value is not valid hex
    """
    content = Path(sidecar_path).read_bytes()
    index = content.find(b" ")
    if index > 0:
        content = content[:index]

    try:
        return binascii.unhexlify(content.strip())
    except (binascii.Error, ValueError) as e:
        raise HashFormatError(f"Invalid checksum in {sidecar_path}: {e}") from e


def verify_file_digest(file_path: Union[str, Path], expected: bytes) -> None:
    """
    Verify a file against an expected raw digest.

    Raises:
        HashMismatch: If the computed digest differs from ``expected``
    """
    actual = compute_file_hash(file_path)
    expected_hex = expected.hex()

    if not _constant_time_compare(actual, expected_hex):
        logger.error(f"SHA256 mismatch for {file_path}")
        raise HashMismatch(file_path, expected_hex, actual)

    logger.debug(f"SHA256 verified for {file_path}")


def _constant_time_compare(a: str, b: str) -> bool:
    """Compare two hex strings in constant time."""
    return secrets.compare_digest(a.lower().encode("utf-8"), b.lower().encode("utf-8"))


__all__ = [
    "SIDECAR_SUFFIX",
    "compute_file_hash",
    "read_checksum_sidecar",
    "verify_file_digest",
]
