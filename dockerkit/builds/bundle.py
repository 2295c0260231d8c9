"""
Copy binaries out of a Docker build bundle directory.

A Docker build writes its binaries to ``bundles/<version>/<binary-dir>/``,
each next to a ``.sha256`` sidecar and suffixed with the version, e.g.
``docker-1.10.0-dev`` and ``docker-1.10.0-dev.sha256``. Installing strips the
version suffix and checks every copy against its sidecar.
"""

import logging
from pathlib import Path
from typing import List, Union

from dockerkit.core.exceptions import SourceNotFoundError
from dockerkit.core.filesystem import copy_file
from dockerkit.core.verification import (
    SIDECAR_SUFFIX,
    read_checksum_sidecar,
    verify_file_digest,
)

logger = logging.getLogger(__name__)

BUNDLES_DIR_NAME = "bundles"


def version_suffix(source: Union[str, Path]) -> str:
    """
    Get the version suffix used for binaries in a bundle directory.

    The expected layout is ``*/bundles/<version>/<binary-dir>``; any other
    layout has no suffix.

    Example:
        >>> version_suffix('/go/src/docker/bundles/1.10.0-dev/binary')
        '-1.10.0-dev'
        >>> version_suffix('/tmp/out')
        ''
    """
    version_dir = Path(source).parent
    if version_dir.parent.name == BUNDLES_DIR_NAME:
        return "-" + version_dir.name
    return ""


def copy_bundle_binaries(
    source: Union[str, Path], target: Union[str, Path]
) -> List[Path]:
    """
    Copy binaries out of a bundle directory.

    Every binary with a ``.sha256`` sidecar in ``source`` is copied to
    ``target`` without its version suffix and verified against the sidecar.

    Args:
        source: Bundle binary directory
        target: Directory to install binaries into

    Returns:
        Paths of the installed binaries

    Raises:
        SourceNotFoundError: If a sidecar has no matching binary
        HashFormatError: If a sidecar does not hold a hex digest
        HashMismatch: If a copied binary does not match its sidecar
        FilesystemError: If copying fails
    """
    source = Path(source)
    target = Path(target)
    suffix = version_suffix(source)

    installed = []
    for sidecar in sorted(source.glob(f"*{SIDECAR_SUFFIX}")):
        name = sidecar.name[: -len(SIDECAR_SUFFIX)]
        target_name = name
        if suffix and target_name.endswith(suffix):
            target_name = target_name[: -len(suffix)]

        installed.append(
            _copy_binary(source / name, target / target_name, sidecar)
        )

    return installed


def _copy_binary(source: Path, dest: Path, sidecar: Path) -> Path:
    if not source.exists():
        raise SourceNotFoundError(f"Missing file {source}")

    logger.info(f"Installing {source.name} to {dest}")
    copy_file(source, dest, 0o755)

    if sidecar.exists():
        verify_file_digest(dest, read_checksum_sidecar(sidecar))

    return dest


__all__ = [
    "version_suffix",
    "copy_bundle_binaries",
]
