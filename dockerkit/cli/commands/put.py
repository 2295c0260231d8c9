"""
Put command implementation.

Stores a Docker binary in the build cache.
"""

import logging

from dockerkit.builds.version import parse_version
from dockerkit.cli import utils

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the put command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    version = parse_version(args.version_spec)
    cache = utils.build_cache_from_args(args)
    cache.put_version(version, args.file)
    return 0
