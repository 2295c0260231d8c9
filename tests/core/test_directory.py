"""
Unit tests for default directory resolution.
"""

from unittest.mock import patch

import pytest

from dockerkit.core.directory import (
    DirectoryError,
    get_build_cache_dir,
    get_install_dir,
)


class TestDefaultDirectories:
    """Test build cache and install directory defaults."""

    def test_build_cache_default(self, isolated_home):
        """Test cache defaults to ~/.dockerkit/builds."""
        assert get_build_cache_dir() == isolated_home / ".dockerkit" / "builds"

    def test_install_dir_default(self, isolated_home):
        """Test install dir defaults to ~/.bin."""
        assert get_install_dir() == isolated_home / ".bin"

    def test_build_cache_env_override(self, isolated_home, tmp_path, monkeypatch):
        """Test $DOCKERKIT_BUILD_CACHE overrides the default."""
        monkeypatch.setenv("DOCKERKIT_BUILD_CACHE", str(tmp_path / "cache"))
        assert get_build_cache_dir() == tmp_path / "cache"

    def test_install_dir_env_override(self, isolated_home, tmp_path, monkeypatch):
        """Test $DOCKERKIT_INSTALL_DIR overrides the default."""
        monkeypatch.setenv("DOCKERKIT_INSTALL_DIR", str(tmp_path / "bin"))
        assert get_install_dir() == tmp_path / "bin"

    def test_empty_env_uses_default(self, isolated_home, monkeypatch):
        """Test an empty variable is ignored."""
        monkeypatch.setenv("DOCKERKIT_BUILD_CACHE", "")
        assert get_build_cache_dir() == isolated_home / ".dockerkit" / "builds"

    def test_home_unavailable(self, isolated_home):
        """Test an undeterminable home raises DirectoryError."""
        with patch("pathlib.Path.home", side_effect=RuntimeError("no home")):
            with pytest.raises(DirectoryError, match="DOCKERKIT_BUILD_CACHE"):
                get_build_cache_dir()
