"""Catalog data models — sources, scenarios, readers, and writers.

The catalog is declarative: a ``Source`` groups the ``Scenario`` objects
that apply to one website, and each scenario lists the ``Reader`` and
``Writer`` scripts available while the browser sits on a matching URL.

All models are frozen. Ids must be unique inside their enclosing scope;
duplicates are rejected when the enclosing model is constructed rather
than silently shadowed at lookup time.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from sidecar.exceptions import DuplicateIdError


class DataType(str, Enum):
    """Kind of data a reader produces."""

    TEXT = "text"
    JSON = "json"
    IMAGE = "image"
    BINARY = "binary"


class ReaderKind(str, Enum):
    """How the executor should run a reader."""

    DATA_EXTRACTION = "data_extraction"
    SCREENSHOT_CAPTURE = "screenshot_capture"


class _CatalogModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class Reader(_CatalogModel):
    """A script that extracts data from the current page without changing it."""

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    data_type: DataType
    script: str
    kind: ReaderKind = ReaderKind.DATA_EXTRACTION
    test_fixture: str | None = Field(
        default=None,
        description="Local HTML fixture used to exercise the script offline.",
    )


class Writer(_CatalogModel):
    """A script that mutates the current page (fills inputs, clicks, …).

    When the caller supplies input data, the script can read it through
    the ``__INPUT_DATA__`` constant.
    """

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    script: str
    test_fixture: str | None = None


def _reject_duplicates(ids: list[str], kind: str, scope: str) -> None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            raise DuplicateIdError(kind, item_id, scope)
        seen.add(item_id)


class Scenario(_CatalogModel):
    """A URL-pattern-triggered context within a source.

    ``url_pattern`` is searched (not anchored) against the full URL.
    """

    id: str = Field(..., min_length=1)
    name: str
    url_pattern: str
    readers: tuple[Reader, ...] = ()
    writers: tuple[Writer, ...] = ()

    @field_validator("url_pattern")
    @classmethod
    def validate_url_pattern(cls, v: str) -> str:
        """Validate that url_pattern is a compilable regex."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regex in url_pattern: {e}") from e
        return v

    @model_validator(mode="after")
    def _unique_action_ids(self) -> "Scenario":
        _reject_duplicates([r.id for r in self.readers], "reader", self.id)
        _reject_duplicates([w.id for w in self.writers], "writer", self.id)
        return self


class Source(_CatalogModel):
    """A target website or platform.

    An empty ``domains`` tuple marks the universal source, which applies to
    any hostname but only when no domain-specific source matches.
    """

    id: str = Field(..., min_length=1)
    name: str
    domains: tuple[str, ...] = ()
    scenarios: tuple[Scenario, ...] = ()

    @model_validator(mode="after")
    def _unique_scenario_ids(self) -> "Source":
        _reject_duplicates([s.id for s in self.scenarios], "scenario", self.id)
        return self

    @property
    def is_universal(self) -> bool:
        """Return ``True`` when the source has no domains."""
        return not self.domains

    def matches_hostname(self, hostname: str) -> bool:
        """Return ``True`` if any declared domain is a substring of *hostname*."""
        return any(domain in hostname for domain in self.domains)
