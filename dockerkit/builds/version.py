"""
Docker release versions: parsing, ordering and download locations.

Versions are written ``[v]MAJOR.MINOR.PATCH[-TAG][@COMMIT]`` as used by the
``docker --version`` output and by git tags, for example ``1.10.3``,
``v1.11.0-rc1``, ``17.03.0-ce``, ``17.06.0-ce-rc2`` or ``1.12.0-dev@4f2a9c1-dirty``.

Usage:
    from dockerkit.builds.version import parse_version

    version = parse_version("17.03.0-ce")
    print(version.download_url("linux", "x86_64"))
"""

import dataclasses
import functools
import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

from dockerkit.core.exceptions import (
    BinaryVersionError,
    UnsupportedVersionFormat,
    VersionParseError,
)
from dockerkit.core.platform import legacy_os_name, resolve_platform

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(
    r"v?([0-9]+)\.([0-9]+)\.([0-9]+)"
    r"(?:-([a-z][a-z0-9]*(?:-[a-z][a-z0-9]*)*))?"
    r"(?:@([a-f0-9]+(?:-dirty)?))?"
)

VERSION_OUTPUT_PATTERN = re.compile(
    r"Docker version ([a-z0-9-.]+), build ([a-f0-9]+(?:-dirty)?)"
)

# Version 17 is where numbering switched to YY.MM
CALENDAR_VERSION_MAJOR = 17

LEGACY_RELEASE_URL = (
    "https://get.docker.com/builds/{os}/{arch}/docker-{version}{suffix}"
)
LEGACY_TEST_URL = (
    "https://test.docker.com/builds/{os}/{arch}/docker-{version}-{tag}{suffix}"
)
CHANNEL_URL = (
    "https://download.docker.com/{os}/static/{channel}/{arch}/"
    "docker-{version}-{tag}{suffix}"
)


def format_version_number(major: int, minor: int, patch: int) -> str:
    """
    Format a version number the way Docker released it.

    Example:
        >>> format_version_number(1, 9, 1)
        '1.9.1'
        >>> format_version_number(17, 3, 0)
        '17.03.0'
    """
    if major < CALENDAR_VERSION_MAJOR:
        return f"{major}.{minor}.{patch}"
    return f"{major:02d}.{minor:02d}.{patch}"


def _tag_rank(tag: str) -> int:
    # dev < other tags < rc* < final release
    if tag == "":
        return 3
    if tag.startswith("rc"):
        return 2
    if tag == "dev":
        return 0
    return 1


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """
    A specific release or build of Docker.

    Attributes:
        number: (major, minor, patch)
        tag: Pre-release or channel qualifier ('rc1', 'ce', 'dev'), '' for final
        commit: Build commit hash, optionally suffixed '-dirty', '' if unknown
        name: Display form as parsed, without the commit (derived, not settable)

    Equality and ordering ignore ``name``. Use :func:`parse_version` or
    :func:`static_version` to build instances.
    """

    number: Tuple[int, int, int]
    tag: str = ""
    commit: str = ""
    name: str = field(default="", init=False, compare=False)

    def __post_init__(self):
        number = tuple(int(n) for n in self.number)
        if len(number) != 3 or any(n < 0 for n in number):
            raise ValueError(
                f"Version number must be three non-negative ints: {self.number}"
            )
        object.__setattr__(self, "number", number)
        if not self.name:
            name = "v" + format_version_number(*number)
            if self.tag:
                name += "-" + self.tag
            object.__setattr__(self, "name", name)

    @property
    def major(self) -> int:
        return self.number[0]

    @property
    def minor(self) -> int:
        return self.number[1]

    @property
    def patch(self) -> int:
        return self.number[2]

    @property
    def version_string(self) -> str:
        """Version number formatted as released, without tag or commit."""
        return format_version_number(*self.number)

    def with_commit(self, commit: str) -> "Version":
        """Return a copy of this version identifying the given build commit."""
        return _with_name(dataclasses.replace(self, commit=commit), self.name)

    def __str__(self) -> str:
        if self.commit:
            return f"{self.name}@{self.commit}"
        return self.name

    def __eq__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return (self.number, self.tag, self.commit) == (
            other.number,
            other.tag,
            other.commit,
        )

    def __hash__(self) -> int:
        return hash((self.number, self.tag, self.commit))

    def __lt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) < 0

    def download_url(
        self, os_name: Optional[str] = None, arch: Optional[str] = None
    ) -> str:
        """
        Get the download location of this release.

        Pre-17.03 releases live on get.docker.com (final) and test.docker.com
        (release candidates). Later releases live on download.docker.com under a
        channel chosen from the tag: 'ce' is stable, 'ce-rc*' is test. Releases
        from 1.11.0-rc1 on are tarballs.

        Args:
            os_name: Target OS in Docker's naming (default: host OS)
            arch: Target architecture (default: host architecture)

        Returns:
            Download URL

        Raises:
            UnsupportedVersionFormat: If no known scheme covers this version

        Example:
            >>> parse_version("1.9.0").download_url("linux", "x86_64")
            'https://get.docker.com/builds/Linux/x86_64/docker-1.9.0'
        """
        info = resolve_platform(os_name, arch)
        suffix = "" if self < MULTI_BINARY_VERSION else ".tgz"

        if self.major < CALENDAR_VERSION_MAJOR:
            if self.tag == "":
                return LEGACY_RELEASE_URL.format(
                    os=legacy_os_name(info.os),
                    arch=info.arch,
                    version=self.version_string,
                    suffix=suffix,
                )
            if self.tag.startswith("rc"):
                return LEGACY_TEST_URL.format(
                    os=legacy_os_name(info.os),
                    arch=info.arch,
                    version=self.version_string,
                    tag=self.tag,
                    suffix=suffix,
                )

        if self.tag.startswith("ce"):
            channel = "test" if self.tag.startswith("ce-rc") else "stable"
            # TODO: support the edge channel
            return CHANNEL_URL.format(
                os=info.os.lower(),
                channel=channel,
                arch=info.arch,
                version=self.version_string,
                tag=self.tag,
                suffix=suffix,
            )

        raise UnsupportedVersionFormat(
            f"No download location known for version {self}"
        )


def parse_version(value: str) -> Version:
    """
    Parse a version string as used by the Docker version command and git tags.

    Args:
        value: Version string, e.g. 'v1.11.0-rc1' or '1.12.0-dev@4f2a9c1'

    Returns:
        Parsed Version; ``name`` excludes any '@commit' suffix

    Raises:
        VersionParseError: If the string is not a version
    """
    text = value.strip()
    match = VERSION_PATTERN.fullmatch(text)
    if not match:
        raise VersionParseError(value)

    major, minor, patch, tag, commit = match.groups()
    name = text
    if commit:
        name = text[: -(len(commit) + 1)]

    version = Version(
        number=(int(major), int(minor), int(patch)),
        tag=tag or "",
        commit=commit or "",
    )
    return _with_name(version, name)


def _with_name(version: Version, name: str) -> Version:
    object.__setattr__(version, "name", name)
    return version


def static_version(major: int, minor: int, patch: int, tag: str = "") -> Version:
    """
    Build a version for a given release number.

    Useful to compare a version against a specific release.

    Example:
        >>> parse_version("1.10.3") < static_version(1, 11, 0, "rc1")
        True
    """
    return Version(number=(major, minor, patch), tag=tag)


def compare_versions(a: Version, b: Version) -> int:
    """
    Order two versions.

    Numbers compare first. For equal numbers, tags rank 'dev' lowest, then
    other tags, then 'rc' tags, then the final release; tags of the same rank
    compare as strings. Equal numbers and tags fall back to comparing commits,
    which only gives a consistent order, not which build is newer.

    Returns:
        -1, 0 or 1 as ``a`` is less than, equal to or greater than ``b``
    """
    if a.number != b.number:
        return _cmp(a.number, b.number)

    if a.tag != b.tag:
        rank_a, rank_b = _tag_rank(a.tag), _tag_rank(b.tag)
        if rank_a != rank_b:
            return _cmp(rank_a, rank_b)
        return _cmp(a.tag, b.tag)

    return _cmp(a.commit, b.commit)


def binary_version(executable: Union[str, Path]) -> Version:
    """
    Get the version of a Docker binary by running it with ``--version``.

    Args:
        executable: Path to the docker binary

    Returns:
        Version including the build commit

    Raises:
        BinaryVersionError: If the binary cannot be run or exits non-zero
        UnsupportedVersionFormat: If the output is not Docker's version line
    """
    try:
        result = subprocess.run(
            [str(executable), "--version"],
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as e:
        raise BinaryVersionError(f"Failed to run {executable}: {e}") from e

    if result.returncode != 0:
        raise BinaryVersionError(
            f"{executable} --version exited with {result.returncode}: "
            f"{result.stderr.strip()}"
        )

    output = result.stdout.strip()
    match = VERSION_OUTPUT_PATTERN.search(output)
    if not match:
        raise UnsupportedVersionFormat(f"Unexpected response from version: {output}")

    try:
        version = parse_version(match.group(1))
    except VersionParseError as e:
        raise UnsupportedVersionFormat(
            f"Unrecognized version {match.group(1)!r} reported by {executable}"
        ) from e

    logger.debug(f"{executable} reports version {version} build {match.group(2)}")
    return version.with_commit(match.group(2))


# First release distributed as a tarball of multiple binaries
MULTI_BINARY_VERSION = static_version(1, 11, 0, "rc1")


__all__ = [
    "Version",
    "VERSION_PATTERN",
    "CALENDAR_VERSION_MAJOR",
    "MULTI_BINARY_VERSION",
    "format_version_number",
    "parse_version",
    "static_version",
    "compare_versions",
    "binary_version",
]
