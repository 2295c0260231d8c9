"""
dockerkit - fetch, cache and install Docker release builds.
"""

__version__ = "0.1.0"
