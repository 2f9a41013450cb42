"""Scenario detector — URL-to-scenario matching within a source.

Scenarios are checked in declaration order and the first match wins, so a
source should list its most specific scenarios first. Patterns are searched
against the full URL with no implicit anchoring.
"""

from __future__ import annotations

import logging
import re

from sidecar.catalog.models import Reader, Scenario, Source, Writer

logger = logging.getLogger(__name__)


class ScenarioDetector:
    """Resolves the active scenario of a source for a live URL."""

    def __init__(self) -> None:
        self._compiled: dict[tuple[str, str], re.Pattern[str]] = {}

    def _pattern(self, source: Source, scenario: Scenario) -> re.Pattern[str]:
        key = (source.id, scenario.id)
        compiled = self._compiled.get(key)
        if compiled is None or compiled.pattern != scenario.url_pattern:
            compiled = re.compile(scenario.url_pattern)
            self._compiled[key] = compiled
        return compiled

    def detect(self, source: Source, url: str) -> Scenario | None:
        """Return the first scenario of *source* whose pattern matches *url*.

        Args:
            source: The source resolved for the URL's hostname.
            url: The full live URL.

        Returns:
            The matching ``Scenario``, or ``None`` when no scenario applies.
        """
        for scenario in source.scenarios:
            if self._pattern(source, scenario).search(url):
                logger.info("Scenario match: %s → %s/%s", url, source.id, scenario.id)
                return scenario
        logger.debug("No scenario of %s matches %s", source.id, url)
        return None

    def find_by_id(self, source: Source, scenario_id: str) -> Scenario | None:
        """Return the scenario of *source* with id *scenario_id*, or ``None``."""
        return next((s for s in source.scenarios if s.id == scenario_id), None)

    def scenarios_for(self, source: Source) -> list[Scenario]:
        """Return a copy of the scenarios declared by *source*."""
        return list(source.scenarios)


def find_reader(scenario: Scenario, reader_id: str) -> Reader | None:
    """Return the reader with id *reader_id* in *scenario*, or ``None``."""
    return next((r for r in scenario.readers if r.id == reader_id), None)


def find_writer(scenario: Scenario, writer_id: str) -> Writer | None:
    """Return the writer with id *writer_id* in *scenario*, or ``None``."""
    return next((w for w in scenario.writers if w.id == writer_id), None)
