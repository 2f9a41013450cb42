"""Built-in sources shipped with Sidecar.

Add new sources by defining a module beside these and listing it in
``builtin_sources``. The universal source comes first so its readers are
offered on every page.
"""

from __future__ import annotations

from sidecar.catalog.models import Source
from sidecar.catalog.registry import SourceRegistry
from sidecar.catalog.sources.calendly import calendly_source
from sidecar.catalog.sources.linkedin import linkedin_source
from sidecar.catalog.sources.universal import UNIVERSAL_SOURCE_ID, universal_source


def builtin_sources() -> list[Source]:
    """Return the built-in sources in registration order."""
    return [universal_source, linkedin_source, calendly_source]


def build_registry() -> SourceRegistry:
    """Return a fresh registry populated with the built-in sources."""
    return SourceRegistry(builtin_sources())


__all__ = ["UNIVERSAL_SOURCE_ID", "build_registry", "builtin_sources"]
