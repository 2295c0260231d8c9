"""
Core functionality for dockerkit.

This package contains the foundational modules that the build cache depends on.
"""

from .directory import (
    get_build_cache_dir,
    get_install_dir,
    DirectoryError,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    resolve_platform,
)

from .exceptions import (
    DockerKitError,
    VersionError,
    VersionParseError,
    UnsupportedVersionFormat,
    BinaryVersionError,
    BuildCacheError,
    CannotDownloadByCommit,
    TransportError,
    FilesystemError,
    SourceNotFoundError,
    DestinationError,
    CopyStreamError,
    ArchiveError,
    InsecureArchiveError,
    VerificationError,
    HashFormatError,
    HashMismatch,
)

__all__ = [
    "get_build_cache_dir",
    "get_install_dir",
    "DirectoryError",
    "PlatformInfo",
    "detect_platform",
    "resolve_platform",
    "DockerKitError",
    "VersionError",
    "VersionParseError",
    "UnsupportedVersionFormat",
    "BinaryVersionError",
    "BuildCacheError",
    "CannotDownloadByCommit",
    "TransportError",
    "FilesystemError",
    "SourceNotFoundError",
    "DestinationError",
    "CopyStreamError",
    "ArchiveError",
    "InsecureArchiveError",
    "VerificationError",
    "HashFormatError",
    "HashMismatch",
]
