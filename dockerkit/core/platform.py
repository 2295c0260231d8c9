"""
Platform detection for dockerkit.

Docker's static release hosts name operating systems and architectures
differently from Python's ``platform`` module. This module detects the host
once and reports it using Docker's download naming.

Usage:
    from dockerkit.core.platform import detect_platform

    info = detect_platform()
    print(f"{info.os}/{info.arch}")  # linux/x86_64
"""

import functools
import platform
from dataclasses import dataclass
from typing import Optional


# Legacy get.docker.com / test.docker.com hosts used uname-style OS names
LEGACY_OS_NAMES = {
    "linux": "Linux",
    "mac": "Darwin",
    "windows": "Windows",
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform in Docker's download naming.

    Attributes:
        os: Operating system ('linux', 'mac', 'windows')
        arch: CPU architecture ('x86_64', 'aarch64', 'armhf', 'i386')
    """

    os: str
    arch: str

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


def legacy_os_name(os_name: str) -> str:
    """Map a download.docker.com OS name to the legacy hosts' spelling."""
    return LEGACY_OS_NAMES.get(os_name.lower(), os_name.capitalize())


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo for the running host
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Raises:
        RuntimeError: If OS is not supported
    """
    system = platform.system().lower()

    if system == "linux":
        return "linux"
    elif system == "darwin":
        return "mac"
    elif system == "windows":
        return "windows"
    else:
        raise RuntimeError(f"Unsupported operating system: {system}")


def _detect_architecture() -> str:
    """Detect CPU architecture using Docker's names."""
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x86_64"
    elif machine in ("aarch64", "arm64"):
        return "aarch64"
    elif machine in ("i386", "i686", "x86"):
        return "i386"
    elif machine.startswith("arm"):
        return "armhf"
    else:
        return machine


def resolve_platform(
    os_name: Optional[str] = None, arch: Optional[str] = None
) -> PlatformInfo:
    """
    Fill in missing OS/architecture values from the detected host.

    Example:
        >>> resolve_platform(arch='aarch64')
        PlatformInfo(os='linux', arch='aarch64')
    """
    if os_name and arch:
        return PlatformInfo(os=os_name, arch=arch)
    host = detect_platform()
    return PlatformInfo(os=os_name or host.os, arch=arch or host.arch)


__all__ = [
    "PlatformInfo",
    "LEGACY_OS_NAMES",
    "legacy_os_name",
    "detect_platform",
    "resolve_platform",
]
