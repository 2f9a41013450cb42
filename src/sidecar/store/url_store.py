"""URL store: remembers the last visited URL and the operator's bookmarks.

The store is a single pretty-printed JSON file::

    {
      "lastUrl": "https://…",
      "lastVisited": "2026-01-01T00:00:00+00:00",
      "bookmarks": [{"url": "…", "title": "…", "timestamp": "…"}]
    }

Local ``file://`` URLs are never persisted. I/O failures are logged and
never raised: a broken store degrades to an empty one, and bookmark
entries that fail validation are skipped.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sidecar.models.results import utc_timestamp

logger = logging.getLogger(__name__)

LOCAL_FILE_PREFIX = "file://"


class BookmarkEntry(BaseModel):
    """A bookmarked page."""

    url: str
    title: str = ""
    timestamp: str


class UrlStoreFile(BaseModel):
    """On-disk shape of the URL store."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    last_url: str | None = Field(default=None, alias="lastUrl")
    last_visited: str | None = Field(default=None, alias="lastVisited")
    bookmarks: list[BookmarkEntry] = Field(default_factory=list)

    @field_validator("bookmarks", mode="before")
    @classmethod
    def _valid_entries(cls, value: Any) -> list[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Ignoring non-list bookmarks in URL store")
            return []
        kept: list[Any] = []
        for entry in value:
            try:
                kept.append(BookmarkEntry.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping malformed bookmark %r: %s", entry, exc.errors()[0]["msg"])
        return kept

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2)


def _is_local(url: str) -> bool:
    return url.startswith(LOCAL_FILE_PREFIX)


class UrlStore:
    """File-backed store for the last URL and bookmarks.

    Args:
        path: Location of the JSON file. Parent directories are created on save.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self.last_error: str | None = None
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> UrlStoreFile:
        try:
            if not self._path.is_file():
                return UrlStoreFile()
            return UrlStoreFile.model_validate_json(self._path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            logger.warning("Ignoring malformed URL store at %s (%d error(s))", self._path, exc.error_count())
        except (OSError, UnicodeDecodeError):
            logger.exception("Error loading URL store from %s", self._path)
        return UrlStoreFile()

    def save(self) -> bool:
        """Write the store to disk. Returns ``False`` if the write failed."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(self._data.to_json(), encoding="utf-8")
        except OSError as exc:
            logger.exception("Error saving URL store to %s", self._path)
            self.last_error = str(exc) or type(exc).__name__
            return False
        self.last_error = None
        return True

    # ------------------------------------------------------------------
    # Last URL
    # ------------------------------------------------------------------

    def get_last_url(self) -> str | None:
        return self._data.last_url or None

    def get_last_visited(self) -> str | None:
        return self._data.last_visited or None

    def set_last_url(self, url: str) -> bool:
        """Remember *url* as the last visited page.

        Returns:
            ``True`` if the URL was recorded and saved.
        """
        if _is_local(url):
            return False
        self._data.last_url = url
        self._data.last_visited = utc_timestamp()
        return self.save()

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    def get_bookmarks(self) -> list[BookmarkEntry]:
        return [b.model_copy() for b in self._data.bookmarks]

    def is_bookmarked(self, url: str) -> bool:
        return any(b.url == url for b in self._data.bookmarks)

    def add_bookmark(self, url: str, title: str) -> bool:
        """Bookmark *url* (newest first).

        Returns:
            ``False`` for local pages and pages already bookmarked.
        """
        if _is_local(url) or self.is_bookmarked(url):
            return False
        self._data.bookmarks.insert(0, BookmarkEntry(url=url, title=title, timestamp=utc_timestamp()))
        self.save()
        return True

    def remove_bookmark(self, url: str) -> bool:
        """Remove the bookmark for *url*. Returns ``True`` if one was removed."""
        remaining = [b for b in self._data.bookmarks if b.url != url]
        if len(remaining) == len(self._data.bookmarks):
            return False
        self._data.bookmarks = remaining
        self.save()
        return True

    def clear(self) -> None:
        """Forget the last URL and every bookmark."""
        self._data = UrlStoreFile()
        self.save()
