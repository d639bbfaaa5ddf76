"""JSON encoding of ledger records shared by all sinks."""

import json
from dataclasses import asdict, is_dataclass
from datetime import date
from enum import Enum
from typing import Any

from fractional_ledger.models import LedgerEvent


def to_dict(record: Any) -> dict:
    """Convert a record to a JSON-ready dictionary.

    A ``LedgerEvent`` keeps its envelope (sequence, type, time, subject) at
    the top level and its payload under ``data``.
    """
    if isinstance(record, LedgerEvent):
        return {
            "sequence": record.sequence,
            "event_type": record.event_type.value,
            "event_time": record.event_time.isoformat(),
            "subject": record.subject,
            "data": serialize_value(record.data),
        }
    if is_dataclass(record) and not isinstance(record, type):
        return serialize_value(asdict(record))
    if isinstance(record, dict):
        return serialize_value(record)
    return {"value": str(record)}


def to_json(record: Any, pretty: bool = False) -> str:
    """Encode a record as JSON, on a single line unless ``pretty``."""
    return json.dumps(
        to_dict(record),
        indent=2 if pretty else None,
        ensure_ascii=False,
        default=str,
    )


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        # Covers datetime too
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value
