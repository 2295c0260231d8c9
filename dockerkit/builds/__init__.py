"""
Docker build versions, the build cache and bundle installation.
"""

from .version import (
    Version,
    MULTI_BINARY_VERSION,
    parse_version,
    static_version,
    compare_versions,
    format_version_number,
    binary_version,
)
from .cache import (
    BuildCache,
    FSBuildCache,
    new_build_cache,
    init_file,
)
from .bundle import copy_bundle_binaries, version_suffix

__all__ = [
    "Version",
    "MULTI_BINARY_VERSION",
    "parse_version",
    "static_version",
    "compare_versions",
    "format_version_number",
    "binary_version",
    "BuildCache",
    "FSBuildCache",
    "new_build_cache",
    "init_file",
    "copy_bundle_binaries",
    "version_suffix",
]
