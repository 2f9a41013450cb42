"""Session controller — wires the catalog, executor, store, and processors.

A host (the CLI, a desktop shell, a test) owns one ``SessionController``
and calls it when the browser navigates or the operator triggers an action.
Every public operation returns a plain dict: unknown ids and unavailable
surfaces come back as ``{"success": False, "error": ...}`` rather than
raising, and changes are announced on the event bus.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from sidecar.browser.executor import ActionExecutor, current_url
from sidecar.catalog.detector import ScenarioDetector, find_reader, find_writer
from sidecar.catalog.models import Reader, Scenario, Source, Writer
from sidecar.catalog.registry import SourceRegistry
from sidecar.catalog.sources import build_registry
from sidecar.models.results import ExecutionResult
from sidecar.monitoring.event_bus import EventBus, EventType, LoggingSink
from sidecar.processors import ProcessorPipeline, build_default_pipeline
from sidecar.store.data_store import DataStore
from sidecar.store.url_store import LOCAL_FILE_PREFIX, UrlStore

if TYPE_CHECKING:
    from sidecar.browser.surface import BrowserSurface
    from sidecar.settings.config import Settings

logger = logging.getLogger(__name__)


def _failure(error: str) -> dict[str, Any]:
    return {"success": False, "error": error}


def _action_summary(action: Reader | Writer) -> dict[str, str]:
    return {"id": action.id, "name": action.name, "description": action.description}


class SessionController:
    """Host-facing facade over one browsing session.

    Args:
        registry: Registered sources.
        detector: Scenario detector.
        executor: Action executor.
        store: Session result store.
        pipeline: Processor pipeline.
        url_store: Optional persistence for the last URL and bookmarks.
        bus: Event bus used to notify the host.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        detector: ScenarioDetector,
        executor: ActionExecutor,
        store: DataStore,
        pipeline: ProcessorPipeline,
        url_store: UrlStore | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.registry = registry
        self.detector = detector
        self.executor = executor
        self.store = store
        self.pipeline = pipeline
        self.url_store = url_store
        self.bus = bus or EventBus([LoggingSink()])

    @classmethod
    def from_settings(cls, settings: "Settings", *, bus: EventBus | None = None) -> "SessionController":
        """Build a controller with the built-in catalog and processors."""
        return cls(
            registry=build_registry(),
            detector=ScenarioDetector(),
            executor=ActionExecutor.from_settings(settings),
            store=DataStore(),
            pipeline=build_default_pipeline(settings),
            url_store=UrlStore(settings.store.url_store_path),
            bus=bus,
        )

    # ------------------------------------------------------------------
    # Catalog resolution
    # ------------------------------------------------------------------

    def resolve(self, url: str) -> tuple[Source | None, Scenario | None]:
        """Return the source and active scenario for *url*."""
        try:
            hostname = urlparse(url).hostname or ""
        except ValueError:
            logger.warning("Unparseable URL: %s", url)
            hostname = ""
        source = self.registry.resolve_by_hostname(hostname)
        if source is None:
            return None, None
        return source, self.detector.detect(source, url)

    def _universal_scenario(self, url: str) -> Scenario | None:
        universal = self.registry.universal
        if universal is None:
            return None
        return self.detector.detect(universal, url)

    def describe_url(self, url: str) -> dict[str, Any]:
        """Return the ``url_changed`` payload for *url*.

        Universal actions are listed ahead of a domain-specific scenario's own.
        """
        source, scenario = self.resolve(url)
        if source is None:
            return {"url": url, "source": None, "scenario": None}

        readers: list[Reader] = list(scenario.readers) if scenario else []
        writers: list[Writer] = list(scenario.writers) if scenario else []
        if not source.is_universal:
            universal_scenario = self._universal_scenario(url)
            if universal_scenario is not None:
                readers = list(universal_scenario.readers) + readers
                writers = list(universal_scenario.writers) + writers

        return {
            "url": url,
            "source": {"id": source.id, "name": source.name},
            "scenario": (
                {
                    "id": scenario.id,
                    "name": scenario.name,
                    "readers": [_action_summary(r) for r in readers],
                    "writers": [_action_summary(w) for w in writers],
                }
                if scenario
                else None
            ),
        }

    def init_payload(self) -> dict[str, Any]:
        """Return the catalog overview sent to the host at start-up."""
        return {
            "sources": [
                {"id": s.id, "name": s.name, "domains": list(s.domains)} for s in self.registry.all()
            ],
            "processors": [p.describe() for p in self.pipeline.all()],
        }

    async def announce(self) -> dict[str, Any]:
        """Emit and return the ``init`` payload."""
        payload = self.init_payload()
        await self.bus.emit(EventType.INIT, payload)
        return payload

    async def on_navigation(self, url: str) -> dict[str, Any]:
        """Record a navigation and notify the host of the new context."""
        if self.url_store is not None:
            self.url_store.set_last_url(url)
        payload = self.describe_url(url)
        await self.bus.emit(EventType.URL_CHANGED, payload)
        return payload

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _lookup(self, source_id: str, scenario_id: str) -> tuple[Source | None, Scenario | None, str | None]:
        source = self.registry.get(source_id)
        if source is None:
            return None, None, "Source not found"
        scenario = self.detector.find_by_id(source, scenario_id)
        if scenario is None:
            return source, None, "Scenario not found"
        return source, scenario, None

    async def run_reader(
        self,
        surface: "BrowserSurface | None",
        source_id: str,
        scenario_id: str,
        reader_id: str,
    ) -> dict[str, Any]:
        """Execute a reader, store its result, and notify the host.

        A reader missing from the scenario is looked up in the universal
        scenario for the surface's URL.
        """
        if surface is None:
            return _failure("Browser surface not available")
        _, scenario, error = self._lookup(source_id, scenario_id)
        if scenario is None:
            return _failure(error or "Scenario not found")

        reader = find_reader(scenario, reader_id)
        if reader is None:
            universal_scenario = self._universal_scenario(current_url(surface))
            if universal_scenario is not None:
                reader = find_reader(universal_scenario, reader_id)
        if reader is None:
            return _failure("Reader not found")

        result = await self.executor.execute_reader(surface, reader, source_id, scenario_id)
        return await self._record(result)

    async def run_writer(
        self,
        surface: "BrowserSurface | None",
        source_id: str,
        scenario_id: str,
        writer_id: str,
        input_data: Any = None,
    ) -> dict[str, Any]:
        """Execute a writer, store its result, and notify the host."""
        if surface is None:
            return _failure("Browser surface not available")
        _, scenario, error = self._lookup(source_id, scenario_id)
        if scenario is None:
            return _failure(error or "Scenario not found")

        writer = find_writer(scenario, writer_id)
        if writer is None:
            return _failure("Writer not found")

        result = await self.executor.execute_writer(surface, writer, source_id, scenario_id, input_data)
        return await self._record(result)

    async def _record(self, result: ExecutionResult) -> dict[str, Any]:
        record_id = self.store.add(result)
        await self._notify_data_updated()
        return {**result.to_dict(), "recordId": record_id}

    # ------------------------------------------------------------------
    # Records and processors
    # ------------------------------------------------------------------

    def records(self) -> list[dict[str, Any]]:
        """Return every stored record in insertion order."""
        return [record.to_dict() for record in self.store.get_all()]

    def processors_for(self, record_id: str) -> list[dict[str, Any]]:
        """Return the processors compatible with a stored record's data type."""
        record = self.store.get(record_id)
        if record is None:
            return []
        return [p.describe() for p in self.pipeline.compatible_with(record.result.data_type)]

    async def run_processor(self, record_id: str, processor_id: str) -> dict[str, Any]:
        """Apply a processor to a stored record and annotate it on success."""
        record = self.store.get(record_id)
        if record is None:
            return _failure("Record not found")
        processor = self.pipeline.get(processor_id)
        if processor is None:
            return _failure("Processor not found")

        outcome = await self.pipeline.execute(processor_id, record.result.data)
        if not outcome.success:
            return outcome.to_dict()

        self.store.update_processed(record_id, processor.id, processor.name, outcome.output)
        await self._notify_data_updated()
        return outcome.to_dict()

    async def clear_records(self) -> dict[str, Any]:
        """Drop every stored record."""
        self.store.clear()
        await self._notify_data_updated()
        return {"success": True}

    async def _notify_data_updated(self) -> None:
        await self.bus.emit(EventType.DATA_UPDATED, {"records": self.records()})

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    def bookmarks(self) -> list[dict[str, Any]]:
        if self.url_store is None:
            return []
        return [b.model_dump() for b in self.url_store.get_bookmarks()]

    def add_bookmark(self, url: str, title: str) -> dict[str, Any]:
        if self.url_store is None:
            return _failure("URL store not configured")
        if url.startswith(LOCAL_FILE_PREFIX):
            return _failure("Cannot bookmark local pages")
        if not self.url_store.add_bookmark(url, title):
            return _failure("Page already bookmarked")
        if self.url_store.last_error:
            return _failure(f"Bookmark could not be saved: {self.url_store.last_error}")
        return {"success": True, "message": "Bookmark added"}

    def remove_bookmark(self, url: str) -> dict[str, Any]:
        if self.url_store is None:
            return _failure("URL store not configured")
        return {"success": self.url_store.remove_bookmark(url)}
