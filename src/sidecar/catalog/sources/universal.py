"""Universal source — actions available on every page regardless of domain."""

from __future__ import annotations

from sidecar.catalog.models import DataType, Reader, ReaderKind, Scenario, Source

UNIVERSAL_SOURCE_ID = "universal"

screenshot_reader = Reader(
    id="screenshot",
    name="Screenshot",
    description="Capture a full-page screenshot of the current page",
    data_type=DataType.IMAGE,
    kind=ReaderKind.SCREENSHOT_CAPTURE,
    # Kept for hosts that still dispatch on the returned marker.
    script="({ screenshot: true })",
)

universal_scenario = Scenario(
    id="universal",
    name="Universal",
    url_pattern=r".*",
    readers=[screenshot_reader],
    writers=[],
)

universal_source = Source(
    id=UNIVERSAL_SOURCE_ID,
    name="Universal",
    domains=[],
    scenarios=[universal_scenario],
)
