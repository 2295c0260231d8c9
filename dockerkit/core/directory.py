"""
Default locations for the build cache and installed binaries.

Directory Structure:
    Build cache (~/.dockerkit/builds/, or $DOCKERKIT_BUILD_CACHE):
        - <major>.<minor>.<patch>[-<tag>] : Released builds
        - <commit>                        : Builds put by commit
        - tmp-*                           : In-flight downloads

    Install directory (~/.bin/, or $DOCKERKIT_INSTALL_DIR):
        - docker, dockerinit (pre 1.11) or docker, dockerd, containerd, ...
"""

import os
from pathlib import Path

from dockerkit.core.exceptions import DockerKitError


BUILD_CACHE_ENV = "DOCKERKIT_BUILD_CACHE"
INSTALL_DIR_ENV = "DOCKERKIT_INSTALL_DIR"


class DirectoryError(DockerKitError):
    """Base exception for directory-related errors."""

    pass


def get_home_dir() -> Path:
    """
    Get the current user's home directory.

    Raises:
        DirectoryError: If the home directory cannot be determined
    """
    try:
        return Path.home()
    except RuntimeError as e:
        raise DirectoryError(
            f"Cannot determine home directory: {e}. "
            f"Set {BUILD_CACHE_ENV} and {INSTALL_DIR_ENV} explicitly."
        ) from e


def get_build_cache_dir() -> Path:
    """
    Get the build cache directory path.

    Returns:
        $DOCKERKIT_BUILD_CACHE if set, otherwise ~/.dockerkit/builds

    Example:
        >>> get_build_cache_dir()
        PosixPath('/home/user/.dockerkit/builds')
    """
    override = os.environ.get(BUILD_CACHE_ENV)
    if override:
        return Path(override).expanduser()
    return get_home_dir() / ".dockerkit" / "builds"


def get_install_dir() -> Path:
    """
    Get the directory binaries are installed to.

    Returns:
        $DOCKERKIT_INSTALL_DIR if set, otherwise ~/.bin
    """
    override = os.environ.get(INSTALL_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return get_home_dir() / ".bin"


__all__ = [
    "BUILD_CACHE_ENV",
    "INSTALL_DIR_ENV",
    "DirectoryError",
    "get_home_dir",
    "get_build_cache_dir",
    "get_install_dir",
]
