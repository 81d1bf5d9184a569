"""
CrossTag.

Relational data synchronization engine for a tag-based bookmark manager.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("crosstag")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
