"""
HTTP adapter for the series provider.
"""

from series_store import __version__

__all__ = ["__version__"]
