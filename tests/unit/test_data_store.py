"""Unit tests for the session result store and result models."""

from __future__ import annotations

import re
import threading
from typing import Any

from sidecar.catalog.models import DataType
from sidecar.models.results import DataRecord, ExecutionResult, ImageData, ProcessorOutcome
from sidecar.store.data_store import DataStore


def _make_result(**overrides: Any) -> ExecutionResult:
    defaults: dict[str, Any] = {
        "success": True,
        "data": {"messages": ["a", "b"]},
        "action_id": "extract",
        "action_name": "Extract",
        "data_type": DataType.JSON,
        "scenario_id": "inbox",
        "source_id": "example",
        "url": "https://example.com/inbox",
    }
    defaults.update(overrides)
    return ExecutionResult(**defaults)


class TestDataStore:
    """Append, annotate, and clear semantics."""

    def test_add_returns_formatted_id(self) -> None:
        store = DataStore()
        record_id = store.add(_make_result())
        assert re.fullmatch(r"record-\d+-0", record_id)

    def test_ids_distinct_within_same_millisecond(self) -> None:
        store = DataStore()
        ids = [store.add(_make_result()) for _ in range(50)]
        assert len(set(ids)) == 50
        assert store.count == 50
        assert len(store) == 50

    def test_get_returns_copy(self) -> None:
        store = DataStore()
        record_id = store.add(_make_result())
        record = store.get(record_id)
        record.result.data["messages"].append("mutated")
        assert store.get(record_id).result.data == {"messages": ["a", "b"]}

    def test_add_copies_input(self) -> None:
        store = DataStore()
        result = _make_result()
        record_id = store.add(result)
        result.data["messages"].clear()
        assert store.get(record_id).result.data == {"messages": ["a", "b"]}

    def test_get_unknown(self) -> None:
        assert DataStore().get("record-0-0") is None

    def test_get_all_in_insertion_order(self) -> None:
        store = DataStore()
        ids = [store.add(_make_result(action_id=f"a{i}")) for i in range(3)]
        assert [r.id for r in store.get_all()] == ids

    def test_update_processed_unknown_leaves_store_unchanged(self) -> None:
        store = DataStore()
        record_id = store.add(_make_result())
        assert store.update_processed("missing", "summarize", "Summarize", {}) is False
        assert store.count == 1
        assert store.get(record_id).processed is None

    def test_update_processed_known(self) -> None:
        store = DataStore()
        record_id = store.add(_make_result())
        assert store.update_processed(record_id, "summarize", "Summarize", {"n": 2}) is True
        processed = store.get(record_id).processed
        assert processed.processor_id == "summarize"
        assert processed.processor_name == "Summarize"
        assert processed.output == {"n": 2}
        assert processed.timestamp

    def test_update_processed_is_idempotent(self) -> None:
        store = DataStore()
        record_id = store.add(_make_result())
        store.update_processed(record_id, "summarize", "Summarize", {"n": 2})
        first = store.get(record_id)
        store.update_processed(record_id, "summarize", "Summarize", {"n": 2})
        second = store.get(record_id)
        assert second.processed.output == first.processed.output
        assert second.result == first.result
        assert store.count == 1

    def test_update_replaces_previous_annotation(self) -> None:
        store = DataStore()
        record_id = store.add(_make_result())
        store.update_processed(record_id, "summarize", "Summarize", {"n": 1})
        store.update_processed(record_id, "export-json", "Export JSON", {"file": "x"})
        assert store.get(record_id).processed.processor_id == "export-json"

    def test_clear_resets_counter(self) -> None:
        store = DataStore()
        store.add(_make_result())
        store.add(_make_result())
        store.clear()
        assert store.count == 0
        assert list(store.get_all()) == []
        assert store.add(_make_result()).endswith("-0")

    def test_concurrent_adds_get_unique_ids(self) -> None:
        store = DataStore()
        ids: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            for _ in range(25):
                record_id = store.add(_make_result())
                with lock:
                    ids.append(record_id)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(ids)) == 100
        assert store.count == 100


class TestResultModels:
    """camelCase wire shapes."""

    def test_success_to_dict(self) -> None:
        payload = _make_result().to_dict()
        assert payload["success"] is True
        assert payload["data"] == {"messages": ["a", "b"]}
        assert "error" not in payload
        assert payload["actionId"] == "extract"
        assert payload["actionName"] == "Extract"
        assert payload["scenarioId"] == "inbox"
        assert payload["sourceId"] == "example"
        assert payload["dataType"] == "json"

    def test_failure_to_dict(self) -> None:
        payload = _make_result(success=False, data=None, error="boom", data_type=None).to_dict()
        assert payload["error"] == "boom"
        assert "data" not in payload
        assert "dataType" not in payload

    def test_record_to_dict(self) -> None:
        record = DataRecord(id="record-1-0", result=_make_result())
        payload = record.to_dict()
        assert payload["id"] == "record-1-0"
        assert "processed" not in payload

    def test_image_data_url(self) -> None:
        image = ImageData(base64="AAAA", width=1, height=2)
        assert image.data_url == "data:image/png;base64,AAAA"

    def test_outcome_to_dict(self) -> None:
        assert ProcessorOutcome(success=True, output=1).to_dict() == {"success": True, "output": 1}
        assert ProcessorOutcome(success=False, error="x").to_dict() == {"success": False, "error": "x"}
