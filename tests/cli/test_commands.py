"""
Tests for CLI command implementations, run through the CLI entry point.
"""

import hashlib
from unittest.mock import Mock, patch

import pytest
import responses

from dockerkit.cli.parser import CLI
from tests.fixtures.builds import make_release_tarball


@pytest.fixture
def workspace(tmp_path, monkeypatch, isolated_home):
    """Run commands from an empty directory with an isolated home."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


def run_cli(*argv):
    return CLI().run(list(argv))


class TestCheckCommand:
    """Test check command."""

    def test_uncached(self, workspace, cache_dir, capsys):
        """Test an empty cache reports uncached with exit code 1."""
        result = run_cli("--bc", str(cache_dir), "check", "1.10.3")

        assert result == 1
        assert capsys.readouterr().out.strip() == "uncached"

    def test_cached(self, workspace, cache_dir, capsys):
        """Test a cached release reports cached with exit code 0."""
        cache_dir.mkdir()
        (cache_dir / "1.10.3").write_bytes(b"docker")

        result = run_cli("--bc", str(cache_dir), "check", "v1.10.3")

        assert result == 0
        assert capsys.readouterr().out.strip() == "cached"

    def test_env_cache_dir(self, workspace, cache_dir, monkeypatch, capsys):
        """Test $DOCKERKIT_BUILD_CACHE selects the cache."""
        cache_dir.mkdir()
        (cache_dir / "1.10.3").write_bytes(b"docker")
        monkeypatch.setenv("DOCKERKIT_BUILD_CACHE", str(cache_dir))

        assert run_cli("check", "1.10.3") == 0

    def test_config_file_cache_dir(self, workspace, cache_dir, capsys):
        """Test ./dockerkit.yaml selects the cache."""
        cache_dir.mkdir()
        (cache_dir / "1.10.3").write_bytes(b"docker")
        (workspace / "dockerkit.yaml").write_text(f"build_cache: {cache_dir}\n")

        assert run_cli("check", "1.10.3") == 0

    def test_default_cache_dir(self, workspace, isolated_home, capsys):
        """Test the cache defaults to ~/.dockerkit/builds."""
        default = isolated_home / ".dockerkit" / "builds"
        default.mkdir(parents=True)
        (default / "1.10.3").write_bytes(b"docker")

        assert run_cli("check", "1.10.3") == 0


class TestPutCommand:
    """Test put command."""

    def test_put_then_check(self, workspace, cache_dir, legacy_binary, capsys):
        """Test a put build is reported as cached."""
        assert run_cli("--bc", str(cache_dir), "put", "1.9.1", str(legacy_binary)) == 0
        assert run_cli("--bc", str(cache_dir), "check", "1.9.1") == 0
        assert (cache_dir / "1.9.1-init").exists()

    def test_put_bundle_binary_then_install(
        self, workspace, cache_dir, docker_bundle, tmp_path, capsys
    ):
        """Test a pre-1.11 development build from a bundle installs by commit."""
        binary = docker_bundle / "docker-1.10.0-dev"
        target = tmp_path / "bin"

        put = run_cli("--bc", str(cache_dir), "put", "1.10.0-dev@4f2a9c1", str(binary))

        assert put == 0
        assert run_cli("--bc", str(cache_dir), "check", "1.10.0-dev@4f2a9c1") == 0
        assert capsys.readouterr().out.strip() == "cached"

        result = run_cli(
            "--bc", str(cache_dir), "install", "1.10.0-dev@4f2a9c1", "-t", str(target)
        )

        assert result == 0
        assert (target / "docker").read_bytes() == b"docker 1.10.0-dev build"

    def test_put_release_tarball_for_new_layout(self, workspace, cache_dir, tmp_path):
        """Test 1.11.0-rc1 and later entries install from a release tarball."""
        tarball = make_release_tarball(
            tmp_path / "docker-1.12.0-dev.tgz",
            {"docker/docker": b"client", "docker/dockerd": b"daemon"},
        )
        target = tmp_path / "bin"

        run_cli("--bc", str(cache_dir), "put", "1.12.0-dev@4f2a9c1", str(tarball))
        result = run_cli(
            "--bc", str(cache_dir), "install", "1.12.0-dev@4f2a9c1", "-t", str(target)
        )

        assert result == 0
        assert (target / "dockerd").read_bytes() == b"daemon"

    def test_put_plain_binary_for_new_layout_fails_install(
        self, workspace, cache_dir, legacy_binary, tmp_path
    ):
        """Test a plain binary cached for 1.12.0-dev cannot be installed."""
        run_cli("--bc", str(cache_dir), "put", "1.12.0-dev@4f2a9c1", str(legacy_binary))

        result = run_cli(
            "--bc", str(cache_dir), "install", "1.12.0-dev@4f2a9c1", "-t", str(tmp_path)
        )

        assert result == 1

    def test_put_missing_file(self, workspace, cache_dir, tmp_path):
        """Test putting a missing file fails."""
        result = run_cli("--bc", str(cache_dir), "put", "1.9.1", str(tmp_path / "no"))

        assert result == 1


class TestInstallCommand:
    """Test install command."""

    def test_latest_not_supported(self, workspace, capsys):
        """Test installing 'latest' is refused."""
        result = run_cli("install")

        assert result == 1
        assert "not yet supported" in capsys.readouterr().err

    def test_install_cached(self, workspace, cache_dir, legacy_binary, tmp_path):
        """Test installing a cached legacy release into --target."""
        run_cli("--bc", str(cache_dir), "put", "1.9.1", str(legacy_binary))
        target = tmp_path / "bin"

        result = run_cli("--bc", str(cache_dir), "install", "1.9.1", "-t", str(target))

        assert result == 0
        assert (target / "docker").read_bytes() == b"docker 1.9.1 binary"
        assert (target / "dockerinit").exists()

    def test_install_with_put(self, workspace, cache_dir, legacy_binary, tmp_path):
        """Test --put caches the file before installing it."""
        target = tmp_path / "bin"

        result = run_cli(
            "--bc",
            str(cache_dir),
            "install",
            "1.10.0-dev@4f2a9c1",
            "--put",
            str(legacy_binary),
            "--target",
            str(target),
        )

        assert result == 0
        assert (cache_dir / "4f2a9c1").exists()
        assert (target / "docker").exists()

    def test_install_env_target(
        self, workspace, cache_dir, legacy_binary, tmp_path, monkeypatch
    ):
        """Test $DOCKERKIT_INSTALL_DIR selects the target."""
        target = tmp_path / "env-bin"
        monkeypatch.setenv("DOCKERKIT_INSTALL_DIR", str(target))

        run_cli("--bc", str(cache_dir), "put", "1.9.1", str(legacy_binary))
        assert run_cli("--bc", str(cache_dir), "install", "1.9.1") == 0
        assert (target / "docker").exists()

    def test_install_uncached_commit(self, workspace, cache_dir, tmp_path):
        """Test an uncached commit build cannot be installed."""
        result = run_cli(
            "--bc", str(cache_dir), "install", "1.10.3@abc123", "-t", str(tmp_path)
        )

        assert result == 1

    @responses.activate
    def test_install_downloads(self, workspace, cache_dir, tmp_path):
        """Test a missing release is downloaded for the requested platform."""
        tarball = make_release_tarball(
            tmp_path / "release.tgz",
            {"docker/docker": b"client", "docker/dockerd": b"daemon"},
        )
        responses.add(
            responses.GET,
            "https://download.docker.com/linux/static/stable/aarch64/"
            "docker-17.03.0-ce.tgz",
            body=tarball.read_bytes(),
            status=200,
        )
        target = tmp_path / "bin"

        result = run_cli(
            "--bc",
            str(cache_dir),
            "install",
            "17.03.0-ce",
            "-t",
            str(target),
            "--os",
            "linux",
            "--arch",
            "aarch64",
        )

        assert result == 0
        assert (cache_dir / "17.3.0-ce").exists()
        assert (target / "dockerd").read_bytes() == b"daemon"

    @responses.activate
    def test_install_download_failure(self, workspace, cache_dir, tmp_path):
        """Test a failed download exits 1 and caches nothing."""
        responses.add(
            responses.GET,
            "https://get.docker.com/builds/Linux/x86_64/docker-1.10.3",
            status=404,
        )

        result = run_cli(
            "--bc",
            str(cache_dir),
            "install",
            "1.10.3",
            "-t",
            str(tmp_path / "bin"),
            "--os",
            "linux",
            "--arch",
            "x86_64",
        )

        assert result == 1
        assert not (cache_dir / "1.10.3").exists()


class TestUrlCommand:
    """Test url command."""

    def test_url(self, workspace, capsys):
        """Test printing a release URL for an explicit platform."""
        result = run_cli("url", "1.10.3", "--os", "mac", "--arch", "x86_64")

        assert result == 0
        assert capsys.readouterr().out.strip() == (
            "https://get.docker.com/builds/Darwin/x86_64/docker-1.10.3"
        )

    def test_url_platform_from_config(self, workspace, capsys):
        """Test platform values from dockerkit.yaml."""
        (workspace / "dockerkit.yaml").write_text(
            "platform:\n  os: linux\n  arch: armhf\n"
        )

        run_cli("url", "17.03.0-ce")

        assert capsys.readouterr().out.strip() == (
            "https://download.docker.com/linux/static/stable/armhf/"
            "docker-17.03.0-ce.tgz"
        )

    def test_url_unknown(self, workspace):
        """Test versions without a download location fail."""
        assert run_cli("url", "1.12.0-dev", "--os", "linux", "--arch", "x86_64") == 1


class TestBinaryVersionCommand:
    """Test binary-version command."""

    def test_prints_version(self, workspace, capsys):
        """Test the reported version and commit are printed."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = Mock(
                returncode=0,
                stdout="Docker version 1.10.3, build 20f81dd\n",
                stderr="",
            )

            result = run_cli("binary-version", "/usr/bin/docker")

        assert result == 0
        assert capsys.readouterr().out.strip() == "1.10.3@20f81dd"

    def test_failing_binary(self, workspace):
        """Test a binary that cannot run exits 1."""
        with patch("subprocess.run", side_effect=FileNotFoundError("missing")):
            assert run_cli("binary-version", "/nonexistent/docker") == 1


class TestBundleCommand:
    """Test bundle command."""

    def test_copy_bundles(self, workspace, docker_bundle, tmp_path):
        """Test binaries from several bundle directories are installed."""
        dyn = docker_bundle.parent / "dynbinary"
        dyn.mkdir()
        content = b"dynamic docker"
        (dyn / "docker-proxy-1.10.0-dev").write_bytes(content)
        (dyn / "docker-proxy-1.10.0-dev.sha256").write_text(
            hashlib.sha256(content).hexdigest() + "  docker-proxy-1.10.0-dev\n"
        )
        target = tmp_path / "bin"

        result = run_cli("bundle", str(docker_bundle), str(dyn), str(target))

        assert result == 0
        assert (target / "docker").read_bytes() == b"docker 1.10.0-dev build"
        assert (target / "docker-proxy").read_bytes() == content

    def test_tampered_bundle(self, workspace, docker_bundle, tmp_path):
        """Test a checksum mismatch exits 1."""
        (docker_bundle / "docker-1.10.0-dev").write_bytes(b"tampered")

        assert run_cli("bundle", str(docker_bundle), str(tmp_path / "bin")) == 1
