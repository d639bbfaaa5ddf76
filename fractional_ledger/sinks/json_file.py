"""JSON Lines file sink for exporting ledger events."""

import json
import logging
from pathlib import Path
from typing import Any

from fractional_ledger.exceptions import SinkError
from fractional_ledger.sinks.serialization import to_json

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Append records to one JSON Lines file per topic."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON Lines files.
        pretty : bool
            Also write an indented ``<topic>.json`` snapshot on close.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def path_for(self, topic: str) -> Path:
        """File that records for ``topic`` are appended to."""
        # Use topic name as filename (replace dots with underscores)
        return self.output_dir / (topic.replace(".", "_") + ".jsonl")

    def write_batch(self, topic: str, records: list[Any]) -> None:
        """Append a batch of records to the topic's JSON Lines file."""
        file_path = self.path_for(topic)
        try:
            with open(file_path, "a", encoding="utf-8") as f:
                for record in records:
                    f.write(to_json(record) + "\n")
        except OSError as e:
            raise SinkError(f"Cannot write to {file_path}: {e}") from e

        self._counts[topic] = self._counts.get(topic, 0) + len(records)

    def read(self, topic: str) -> list[dict]:
        """Read back every record written for ``topic``."""
        file_path = self.path_for(topic)
        if not file_path.exists():
            return []
        with open(file_path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    def close(self) -> None:
        """Write pretty snapshots if requested and log a summary."""
        for topic, count in self._counts.items():
            if self.pretty:
                snapshot = self.output_dir / (topic.replace(".", "_") + ".json")
                with open(snapshot, "w", encoding="utf-8") as f:
                    json.dump(self.read(topic), f, indent=2, ensure_ascii=False)
            logger.info("JSON sink %s: %d records written to %s", topic, count, self.path_for(topic))
