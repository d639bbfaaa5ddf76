"""Console sink for debugging and development."""

import json
from typing import Any

from fractional_ledger.models import LedgerEvent
from fractional_ledger.sinks.serialization import serialize_value, to_json


class ConsoleSink:
    """Print ledger events to stdout.

    In compact mode each event takes one line::

        #3 SharesPurchased [1] {"property_id": 1, "buyer": "0xa1", "shares": 2, "cost": 200}

    Parameters
    ----------
    pretty : bool
        Print every record as indented JSON instead.
    max_records : int | None
        Maximum records to print per batch (None for all).
    """

    def __init__(self, pretty: bool = True, max_records: int | None = None) -> None:
        self.pretty = pretty
        self.max_records = max_records
        self._counts: dict[str, int] = {}

    def format_record(self, record: Any) -> str:
        if self.pretty:
            return to_json(record, pretty=True)
        if isinstance(record, LedgerEvent):
            payload = json.dumps(serialize_value(record.data), ensure_ascii=False, default=str)
            return f"#{record.sequence} {record.event_type.value} [{record.subject}] {payload}"
        return to_json(record)

    def write_batch(self, topic: str, records: list[Any]) -> None:
        """Print a batch under a topic header."""
        shown = records if self.max_records is None else records[: self.max_records]

        print(f"\n--- {topic}: {len(records)} records ---")
        for record in shown:
            print(self.format_record(record))

        hidden = len(records) - len(shown)
        if hidden > 0:
            print(f"... and {hidden} more records")

        self._counts[topic] = self._counts.get(topic, 0) + len(records)

    def close(self) -> None:
        """Print per-topic totals."""
        print("\nConsole Sink Summary")
        for topic, count in self._counts.items():
            print(f"  {topic}: {count} records")
        print(f"  total: {sum(self._counts.values())} records")
