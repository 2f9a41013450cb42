"""Source registry — hostname-to-source resolution.

The registry holds every known ``Source`` keyed by id. Resolution prefers a
domain-specific source; the universal (domain-less) source is only returned
when nothing more specific matches, regardless of registration order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from sidecar.catalog.models import Source

logger = logging.getLogger(__name__)


class SourceRegistry:
    """Registry of sources keyed by id."""

    def __init__(self, sources: Iterable[Source] | None = None) -> None:
        self._sources: dict[str, Source] = {}
        if sources:
            self.register_many(sources)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, source: Source) -> None:
        """Add a source, replacing any previous source with the same id."""
        if source.id in self._sources:
            logger.warning("Replacing registered source %s", source.id)
        self._sources[source.id] = source

    def register_many(self, sources: Iterable[Source]) -> int:
        """Register several sources and return how many were added."""
        count = 0
        for source in sources:
            self.register(source)
            count += 1
        return count

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, source_id: str) -> Source | None:
        """Return the source registered under *source_id*, or ``None``."""
        return self._sources.get(source_id)

    def all(self) -> Iterator[Source]:
        """Iterate over registered sources.

        Each call returns a fresh iterator over a snapshot of the registry.
        """
        return iter(list(self._sources.values()))

    def resolve_by_hostname(self, hostname: str) -> Source | None:
        """Return the best source for *hostname*.

        The first domain-specific source whose domains occur in *hostname*
        wins. Otherwise the universal source is returned, if one exists.
        """
        universal: Source | None = None
        for source in self._sources.values():
            if source.is_universal:
                universal = source
                continue
            if source.matches_hostname(hostname):
                logger.debug("Hostname %s resolved to source %s", hostname, source.id)
                return source
        if universal is not None:
            logger.debug("Hostname %s fell back to universal source %s", hostname, universal.id)
        return universal

    @property
    def universal(self) -> Source | None:
        """Return the registered universal source, if any."""
        found: Source | None = None
        for source in self._sources.values():
            if source.is_universal:
                found = source
        return found

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def count(self) -> int:
        """Return the number of registered sources."""
        return len(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._sources
