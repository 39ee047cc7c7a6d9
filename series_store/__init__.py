"""
In-memory time-series provider store.

Series are looked up by name; revision-tracked series additionally answer
point-in-time (vintage) and n-th release queries. Editable series support
create, replace and delete with optimistic concurrency.
"""

__version__ = "1.0.0"
