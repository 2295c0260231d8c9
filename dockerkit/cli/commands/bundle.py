"""
Bundle command implementation.

Copies binaries out of Docker build bundle directories.
"""

import logging

from dockerkit.builds.bundle import copy_bundle_binaries

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the bundle command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    target_dir = args.target.resolve()

    for bundle_dir in args.sources:
        bundle_dir = bundle_dir.resolve()
        logger.info(f"Copying {bundle_dir} to {target_dir}")
        copy_bundle_binaries(bundle_dir, target_dir)

    return 0
