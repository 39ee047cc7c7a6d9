"""
API routers for the series provider.

Provider routes are mounted at the server root because clients expect the
exact paths.
"""

__all__ = ["capabilities", "series", "revisions", "edit", "browse", "search", "health"]
