"""Sidecar stores — the session result store and the host's URL store.

``DataStore`` is in-memory and lives for one session. ``UrlStore`` is a
small JSON file the host uses to remember the last URL and bookmarks.
"""

from sidecar.store.data_store import DataStore
from sidecar.store.url_store import BookmarkEntry, UrlStore

__all__ = ["BookmarkEntry", "DataStore", "UrlStore"]
