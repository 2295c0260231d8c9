"""
URL command implementation.

Prints the download location of a released version.
"""

from dockerkit.builds.version import parse_version
from dockerkit.cli import utils


def run(args) -> int:
    """
    Run the url command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    version = parse_version(args.version_spec)
    os_name, arch = utils.resolve_platform_args(args)
    print(version.download_url(os_name, arch))
    return 0
