"""Summarize processor — a quick structural summary of extracted data."""

from __future__ import annotations

import json
from collections import Counter
from typing import Any

from sidecar.catalog.models import DataType
from sidecar.models.results import utc_timestamp
from sidecar.processors.base import Processor

PREVIEW_CHARS = 200


def js_typeof(value: Any) -> str:
    """Name *value*'s type the way the page-side ``typeof`` operator would."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


class SummarizeProcessor(Processor):
    """Summarize chat extractions in detail and anything else generically."""

    id = "summarize"
    name = "Summarize"
    description = "Creates a basic summary of the extracted data"
    compatible_data_types = frozenset({DataType.TEXT, DataType.JSON})

    async def transform(self, data: Any) -> dict[str, Any]:
        if isinstance(data, dict) and data.get("contact") is not None and data.get("messages") is not None:
            kind, summary = "Chat Conversation", _chat_summary(data)
        else:
            kind, summary = "Generic Data", _generic_summary(data)
        return {
            "timestamp": utc_timestamp(),
            "dataType": js_typeof(data),
            "type": kind,
            "summary": summary,
        }


def _chat_summary(data: dict[str, Any]) -> dict[str, Any]:
    contact = data.get("contact") or {}
    messages = data.get("messages") or []
    summary: dict[str, Any] = {
        "contactName": contact.get("name") or "Unknown",
        "contactHeadline": contact.get("headline") or "N/A",
        "totalMessages": data.get("totalMessages") or 0,
        "messagesExtracted": len(messages),
        "conversationUrl": data.get("url"),
        "extractedAt": data.get("timestamp"),
    }
    if isinstance(messages, list):
        summary["messagesBySender"] = dict(
            Counter(m.get("sender", "Unknown") for m in messages if isinstance(m, dict))
        )
    return summary


def _generic_summary(data: Any) -> dict[str, Any]:
    preview = json.dumps(data, default=str)
    if len(preview) > PREVIEW_CHARS:
        preview = preview[:PREVIEW_CHARS] + "..."
    return {
        "keys": list(data.keys()) if isinstance(data, dict) else [],
        "objectCount": len(data) if isinstance(data, list) else 1,
        "preview": preview,
    }
