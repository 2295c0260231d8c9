"""
Shared utilities for CLI commands.

Provides configuration loading and the settings every command resolves the
same way: command-line flag first, then environment variable, then the YAML
configuration file, then the built-in default.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from dockerkit.builds.cache import FSBuildCache
from dockerkit.core.directory import (
    BUILD_CACHE_ENV,
    INSTALL_DIR_ENV,
    get_build_cache_dir,
    get_install_dir,
)
from dockerkit.core.download import DownloadProgress

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "dockerkit.yaml"


# ============================================================================
# Configuration Management
# ============================================================================


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        FileNotFoundError: If required=True and file doesn't exist
        ValueError: If YAML parsing fails or the document is not a mapping

    Example:
        >>> config = load_yaml_config(Path("dockerkit.yaml"))
        >>> config.get("build_cache", "~/.dockerkit/builds")
    """
    if not config_file.exists():
        if required:
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ValueError(f"Invalid YAML in {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration in {config_file} must be a mapping")
    return config


def load_config_from_args(args) -> Dict[str, Any]:
    """
    Load the configuration named by ``--config``, or ./dockerkit.yaml if present.

    An explicitly named file must exist.
    """
    config_path = getattr(args, "config", None)
    if config_path:
        return load_yaml_config(Path(config_path), required=True)
    return load_yaml_config(Path.cwd() / DEFAULT_CONFIG_FILE)


def _resolve_dir(
    flag_value: Optional[Path],
    env_name: str,
    config_value: Optional[str],
    default: Callable[[], Path],
) -> Path:
    if flag_value:
        return Path(flag_value).expanduser()
    if os.environ.get(env_name):
        return Path(os.environ[env_name]).expanduser()
    if config_value:
        return Path(config_value).expanduser()
    return default()


def resolve_build_cache_dir(args) -> Path:
    """Resolve the build cache directory for a command."""
    config = getattr(args, "settings", {}) or {}
    return _resolve_dir(
        getattr(args, "build_cache", None),
        BUILD_CACHE_ENV,
        config.get("build_cache"),
        get_build_cache_dir,
    )


def resolve_install_dir(args) -> Path:
    """Resolve the directory binaries are installed to."""
    config = getattr(args, "settings", {}) or {}
    return _resolve_dir(
        getattr(args, "target", None),
        INSTALL_DIR_ENV,
        config.get("install_dir"),
        get_install_dir,
    )


def resolve_platform_args(args) -> tuple:
    """
    Resolve the (os, arch) to download builds for.

    Missing values are None, meaning the detected host value.
    """
    config = getattr(args, "settings", {}) or {}
    platform_config = config.get("platform") or {}
    os_name = getattr(args, "os", None) or platform_config.get("os")
    arch = getattr(args, "arch", None) or platform_config.get("arch")
    return os_name, arch


def _log_progress(progress: DownloadProgress):
    logger.debug(f"Downloading: {progress}")


def build_cache_from_args(args) -> FSBuildCache:
    """Create the filesystem build cache a command operates on."""
    os_name, arch = resolve_platform_args(args)
    root = resolve_build_cache_dir(args)
    logger.debug(f"Using build cache at {root}")
    return FSBuildCache(
        root, os_name=os_name, arch=arch, progress_callback=_log_progress
    )


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)
