"""
dockerkit CLI argument parser.

This module implements the command-line interface for dockerkit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dockerkit import __version__
from dockerkit.core.exceptions import DockerKitError

logger = logging.getLogger(__name__)


class CLI:
    """dockerkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="dkit",
            description="dockerkit - fetch, cache and install Docker builds",
            epilog='Use "dkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"dockerkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./dockerkit.yaml)",
        )
        parser.add_argument(
            "--build-cache",
            "--bc",
            type=Path,
            metavar="DIR",
            help="Directory to cache builds (default: ~/.dockerkit/builds)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_check_command(subparsers)
        self._add_put_command(subparsers)
        self._add_url_command(subparsers)
        self._add_binary_version_command(subparsers)
        self._add_bundle_command(subparsers)

        return parser

    def _add_platform_options(self, parser):
        parser.add_argument(
            "--os",
            metavar="OS",
            help="Operating system to download for (linux, mac, windows)",
        )
        parser.add_argument(
            "--arch",
            metavar="ARCH",
            help="Architecture to download for (x86_64, aarch64, armhf, ...)",
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install a Docker version",
            description="Install a Docker version from the build cache, "
            "downloading it first if needed",
        )
        parser.add_argument(
            "version_spec",
            nargs="?",
            default="latest",
            metavar="VERSION",
            help="Version to install (e.g., 1.10.3, 17.03.0-ce, v1.12.0@4f2a9c1)",
        )
        parser.add_argument(
            "--target",
            "-t",
            type=Path,
            metavar="DIR",
            help="Directory to install files (default: ~/.bin)",
        )
        parser.add_argument(
            "--put",
            type=Path,
            metavar="FILE",
            help="Put FILE in the cache as VERSION before installing",
        )
        self._add_platform_options(parser)

    def _add_check_command(self, subparsers):
        """Add 'check' subcommand."""
        parser = subparsers.add_parser(
            "check",
            help="Check whether a version is cached",
            description="Print 'cached' and exit 0, or 'uncached' and exit 1",
        )
        parser.add_argument("version_spec", metavar="VERSION", help="Version to check")

    def _add_put_command(self, subparsers):
        """Add 'put' subcommand."""
        parser = subparsers.add_parser(
            "put",
            help="Put a binary in the build cache",
            description="Store a Docker binary in the build cache under a version",
        )
        parser.add_argument("version_spec", metavar="VERSION", help="Version of FILE")
        parser.add_argument("file", type=Path, metavar="FILE", help="Binary to store")

    def _add_url_command(self, subparsers):
        """Add 'url' subcommand."""
        parser = subparsers.add_parser(
            "url",
            help="Print the download URL of a version",
            description="Print where a released Docker version is downloaded from",
        )
        parser.add_argument("version_spec", metavar="VERSION", help="Released version")
        self._add_platform_options(parser)

    def _add_binary_version_command(self, subparsers):
        """Add 'binary-version' subcommand."""
        parser = subparsers.add_parser(
            "binary-version",
            help="Print the version of a Docker binary",
            description="Run a Docker binary with --version and print the result",
        )
        parser.add_argument(
            "binary", type=Path, metavar="PATH", help="Docker binary to inspect"
        )

    def _add_bundle_command(self, subparsers):
        """Add 'bundle' subcommand."""
        parser = subparsers.add_parser(
            "bundle",
            help="Install binaries from build bundle directories",
            description="Copy checksummed binaries out of Docker build bundle "
            "directories (bundles/<version>/<binary-dir>) into a target directory",
        )
        parser.add_argument(
            "sources",
            nargs="+",
            type=Path,
            metavar="SOURCE_DIR",
            help="Bundle binary directory",
        )
        parser.add_argument(
            "target", type=Path, metavar="TARGET_DIR", help="Directory to install into"
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            self._load_config(parsed_args)
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except (DockerKitError, OSError, ValueError) as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _load_config(self, args):
        """
        Attach the YAML configuration to the parsed arguments as ``settings``.

        Args:
            args: Parsed arguments with config field
        """
        from dockerkit.cli.utils import load_config_from_args

        args.settings = load_config_from_args(args)

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "dockerkit.cli.commands.install",
            "check": "dockerkit.cli.commands.check",
            "put": "dockerkit.cli.commands.put",
            "url": "dockerkit.cli.commands.url",
            "binary-version": "dockerkit.cli.commands.binary_version",
            "bundle": "dockerkit.cli.commands.bundle",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
