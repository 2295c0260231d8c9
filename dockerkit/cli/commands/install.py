"""
Install command implementation.

Installs a Docker version from the build cache, downloading it if needed.
"""

import logging

from dockerkit.builds.version import parse_version
from dockerkit.cli import utils

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    if args.version_spec == "latest":
        # TODO: install from the experimental channel's docker-latest build
        utils.print_error("Experimental build installs not yet supported")
        return 1

    version = parse_version(args.version_spec)
    target = utils.resolve_install_dir(args)
    cache = utils.build_cache_from_args(args)

    if args.put:
        cache.put_version(version, args.put)

    installed = cache.install_version(version, target)

    logger.info(f"Installed {version} to {target}")
    for path in installed:
        logger.debug(f"  {path}")

    return 0
