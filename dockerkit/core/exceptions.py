"""
Centralized exception hierarchy for dockerkit.

This module defines all custom exceptions used across the codebase
so that callers can catch a whole family of failures at once.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class DockerKitError(Exception):
    """Base exception for all dockerkit errors."""

    pass


# ============================================================================
# Version Exceptions
# ============================================================================


class VersionError(DockerKitError):
    """Base exception for version-related errors."""

    pass


class VersionParseError(VersionError):
    """Raised when a string is not a recognizable version."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"No version match: {value!r}")


class UnsupportedVersionFormat(VersionError):
    """Raised when a version or version output has no known scheme."""

    pass


class BinaryVersionError(VersionError):
    """Raised when a binary cannot be run to report its version."""

    pass


# ============================================================================
# Build Cache Exceptions
# ============================================================================


class BuildCacheError(DockerKitError):
    """Base exception for build cache errors."""

    pass


class CannotDownloadByCommit(BuildCacheError):
    """Raised when a build specified only by commit is not in the cache."""

    def __init__(self, commit: str):
        self.commit = commit
        super().__init__(f"Cannot download build by commit: {commit}")


# ============================================================================
# Transport Exceptions
# ============================================================================


class TransportError(DockerKitError):
    """Raised when fetching a release over the network fails."""

    pass


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemError(DockerKitError):
    """Base exception for filesystem operations."""

    pass


class SourceNotFoundError(FilesystemError):
    """Source file of a copy does not exist."""

    pass


class DestinationError(FilesystemError):
    """Destination of a copy could not be created or opened."""

    pass


class CopyStreamError(FilesystemError):
    """Copying content from source to destination failed midway."""

    pass


class ArchiveError(FilesystemError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Verification Exceptions
# ============================================================================


class VerificationError(DockerKitError):
    """Base exception for checksum verification errors."""

    pass


class HashFormatError(VerificationError):
    """Raised when a recorded checksum cannot be decoded."""

    pass


class HashMismatch(VerificationError):
    """Raised when a file's digest disagrees with its recorded checksum."""

    def __init__(self, path, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Hash mismatch for {path}: expected {expected}, got {actual}"
        )
