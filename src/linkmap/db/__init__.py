"""
Link Graph Database Layer

Provides Site/Link storage with cascade deletes and oldest-first scheduling.
"""

from linkmap.db.link_graph import LinkEntry, SiteEntry, connect, open_db

__all__ = ["LinkEntry", "SiteEntry", "connect", "open_db"]
