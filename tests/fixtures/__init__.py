"""Test fixtures for dockerkit tests.

- builds: Build cache directories, legacy binaries, release tarballs and
  build bundle directories

Import fixtures in your tests using:
    from tests.fixtures.builds import release_tarball
"""

__all__ = [
    "builds",
]
