"""
Pytest configuration and shared fixtures for dockerkit tests.
"""

import pytest
from pathlib import Path

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.builds import (
    build_cache_dir,
    legacy_binary,
    release_tarball,
    docker_bundle,
)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory and clear dockerkit environment overrides."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.delenv("DOCKERKIT_BUILD_CACHE", raising=False)
    monkeypatch.delenv("DOCKERKIT_INSTALL_DIR", raising=False)

    return fake_home


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset module-level caches between tests."""
    from dockerkit.core import platform

    platform.detect_platform.cache_clear()

    yield
