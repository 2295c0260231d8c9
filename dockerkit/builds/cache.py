"""
Build cache for storing and installing specific versions of Docker.

The filesystem cache is a flat directory. Released builds are stored under
their number and tag (``1.10.3``, ``17.03.0-ce``), builds put by commit under
the commit hash. Missing releases are downloaded on install.

Two install layouts exist:
- Before 1.11.0-rc1 a release is a single ``docker`` binary, optionally with
  a ``dockerinit`` companion next to it.
- From 1.11.0-rc1 on a release is a gzipped tarball whose ``docker/``
  directory holds several binaries.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional, Union

from dockerkit.builds.version import MULTI_BINARY_VERSION, Version
from dockerkit.core.download import DownloadProgress, download_file
from dockerkit.core.exceptions import CannotDownloadByCommit, FilesystemError
from dockerkit.core.filesystem import (
    copy_file,
    extract_archive,
    temporary_directory,
    truncate_file,
)
from dockerkit.core.verification import compute_file_hash

logger = logging.getLogger(__name__)

BINARY_MODE = 0o755
LEGACY_BINARY_NAME = "docker"
ARCHIVE_BINARY_DIR = "docker"


class BuildCache(ABC):
    """
    Abstract interface for a cache of Docker builds.

    Implementations decide where builds are stored; callers only deal in
    versions and install locations.
    """

    @abstractmethod
    def is_cached(self, version: Version) -> bool:
        """
        Check whether the version exists in the cache.

        Args:
            version: Version to look up

        Returns:
            True if a build for the version is cached
        """
        pass

    @abstractmethod
    def put_version(self, version: Version, source: Union[str, Path]) -> None:
        """
        Put the given file in the cache under the provided version.

        Args:
            version: Version the file is a build of
            source: Path of the build to store
        """
        pass

    @abstractmethod
    def install_version(
        self, version: Version, target: Union[str, Path]
    ) -> List[Path]:
        """
        Install the provided version into the target directory.

        Args:
            version: Version to install
            target: Directory to install binaries into

        Returns:
            Paths of the installed files

        Raises:
            DockerKitError: If the version cannot be retrieved or installed
        """
        pass


def init_file(path: Union[str, Path]) -> Path:
    """
    Get the path of the init companion for a binary.

    Example:
        >>> init_file('/usr/local/bin/docker')
        PosixPath('/usr/local/bin/dockerinit')
        >>> init_file('/cache/1.9.1')
        PosixPath('/cache/1.9.1-init')
    """
    path = Path(path)
    name = path.name
    if name.startswith("docker"):
        name = "dockerinit" + name[len("docker") :]
    else:
        name = name + "-init"
    return path.with_name(name)


class FSBuildCache(BuildCache):
    """
    Build cache using a local directory as storage.

    Example:
        >>> cache = FSBuildCache(Path.home() / ".dockerkit" / "builds")
        >>> version = parse_version("1.10.3")
        >>> if not cache.is_cached(version):
        ...     print("will download")
        >>> cache.install_version(version, Path.home() / ".bin")
    """

    def __init__(
        self,
        root: Union[str, Path],
        os_name: Optional[str] = None,
        arch: Optional[str] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
        download_timeout: Optional[float] = None,
    ):
        """
        Initialize filesystem build cache.

        Args:
            root: Cache directory (created on first write)
            os_name: OS to download builds for (default: host OS)
            arch: Architecture to download builds for (default: host arch)
            progress_callback: Optional callback for download progress
            download_timeout: Optional timeout for download requests
        """
        self.root = Path(root)
        self.os_name = os_name
        self.arch = arch
        self.progress_callback = progress_callback
        self.download_timeout = download_timeout

    def _version_file(self, version: Version) -> Path:
        if version.commit:
            raise ValueError(f"Cannot get release file for commit build {version}")

        name = "{}.{}.{}".format(*version.number)
        if version.tag:
            name += "-" + version.tag
        return self.root / name

    def _entry_path(self, version: Version) -> Path:
        if version.commit:
            return self.root / version.commit
        return self._version_file(version)

    def get_cached(self, version: Version) -> Optional[Path]:
        """
        Resolve the cache entry for a version.

        Returns:
            Path of the cached build, or None if not cached
        """
        logger.debug(f"Looking for cached version of {version}")
        entry = self._entry_path(version)
        if entry.is_file():
            return entry
        logger.debug(f"Could not find cache entry at {entry}")
        return None

    def is_cached(self, version: Version) -> bool:
        return self.get_cached(version) is not None

    def put_version(self, version: Version, source: Union[str, Path]) -> None:
        source = Path(source)
        cached = self.get_cached(version)

        if cached is not None:
            try:
                source_digest = compute_file_hash(source)
            except FileNotFoundError as e:
                raise FilesystemError(f"Cannot read source {source}: {e}") from e
            if source_digest == compute_file_hash(cached):
                logger.debug(f"{source} already cached as {cached}")
                return
            logger.debug(f"Overwriting {cached} with {source}")
        else:
            cached = self._entry_path(version)

        copy_file(source, cached, BINARY_MODE)

        source_init = init_file(source)
        if source_init.exists():
            copy_file(source_init, init_file(cached), BINARY_MODE)
        else:
            _remove_stale_init(cached)

        logger.info(f"Cached {source} as {version}")

    def install_version(
        self, version: Version, target: Union[str, Path]
    ) -> List[Path]:
        target = Path(target)
        cached = self.get_cached(version)

        if cached is None:
            logger.debug("No cached file, downloading")
            if version.commit:
                raise CannotDownloadByCommit(version.commit)
            cached = self._download(version)
        else:
            logger.debug(f"Found cached file {cached}")

        if version < MULTI_BINARY_VERSION:
            logger.info(f"Installing {version} to {target}")
            return install_legacy_binary(
                cached, init_file(cached), target / LEGACY_BINARY_NAME
            )

        logger.info(f"Installing multi-binary version {version} to {target}")
        return install_multi_binary(cached, target)

    def _download(self, version: Version) -> Path:
        url = version.download_url(self.os_name, self.arch)
        entry = self._version_file(version)

        logger.debug(f"Downloading {version} from {url}")
        download_file(
            url,
            entry,
            progress_callback=self.progress_callback,
            timeout=self.download_timeout,
        )

        # A fresh download never comes with an init companion
        _remove_stale_init(entry)
        return entry


def _remove_stale_init(entry: Path) -> None:
    stale_init = init_file(entry)
    if stale_init.exists():
        logger.debug(f"Removing stale {stale_init}")
        try:
            stale_init.unlink()
        except OSError as e:
            raise FilesystemError(f"Failed to remove {stale_init}: {e}") from e


def install_legacy_binary(
    cached: Path, cached_init: Path, target: Path
) -> List[Path]:
    """
    Install a pre-1.11 single binary and its init companion.

    When no companion is cached, an existing companion at the target is
    truncated rather than removed: the operator may only have access to the
    file and not the directory, and later installs overwrite its content.

    Args:
        cached: Cached docker binary
        cached_init: Cached init companion (may not exist)
        target: Path to install the binary at

    Returns:
        Paths of the installed files
    """
    installed = [copy_file(cached, target, BINARY_MODE)]

    target_init = init_file(target)
    if cached_init.exists():
        installed.append(copy_file(cached_init, target_init, BINARY_MODE))
    elif target_init.exists():
        logger.debug(f"Truncating stale {target_init}")
        truncate_file(target_init)

    return installed


def install_multi_binary(cached: Path, target: Path) -> List[Path]:
    """
    Install every binary from a release tarball into the target directory.

    Only regular files directly inside the archive's ``docker/`` directory
    are installed; subdirectories are skipped.

    Args:
        cached: Cached release tarball
        target: Directory to install into

    Returns:
        Paths of the installed files

    Raises:
        ArchiveError: If the tarball cannot be extracted
        FilesystemError: If the binaries directory is missing or a copy fails
    """
    installed = []

    with temporary_directory(prefix="dockerkit-install-") as scratch:
        extract_archive(cached, scratch)

        bin_root = scratch / ARCHIVE_BINARY_DIR
        if not bin_root.is_dir():
            raise FilesystemError(
                f"No {ARCHIVE_BINARY_DIR}/ directory in archive {cached}"
            )

        for entry in sorted(bin_root.iterdir()):
            if entry.is_dir():
                logger.debug(f"Skipping installation of directory: {entry.name}")
                continue
            final_path = target / entry.name
            logger.debug(f"Installing {entry.name} to {final_path}")
            installed.append(copy_file(entry, final_path, BINARY_MODE))

    return installed


def new_build_cache(root: Union[str, Path], **kwargs) -> BuildCache:
    """
    Return a build cache using the provided root directory as storage.

    Args:
        root: Cache directory
        **kwargs: Passed to :class:`FSBuildCache`
    """
    return FSBuildCache(root, **kwargs)


__all__ = [
    "BuildCache",
    "FSBuildCache",
    "new_build_cache",
    "init_file",
    "install_legacy_binary",
    "install_multi_binary",
]
