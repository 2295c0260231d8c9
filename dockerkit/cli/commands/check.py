"""
Check command implementation.

Reports whether a version is in the build cache.
"""

from dockerkit.builds.version import parse_version
from dockerkit.cli import utils


def run(args) -> int:
    """
    Run the check command.

    Returns:
        0 if the version is cached, 1 otherwise
    """
    version = parse_version(args.version_spec)
    cache = utils.build_cache_from_args(args)

    if cache.is_cached(version):
        print("cached")
        return 0

    print("uncached")
    return 1
