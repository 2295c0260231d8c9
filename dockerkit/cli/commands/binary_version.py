"""
Binary-version command implementation.

Prints the version a Docker binary reports about itself.
"""

from dockerkit.builds.version import binary_version


def run(args) -> int:
    """
    Run the binary-version command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    print(binary_version(args.binary))
    return 0
