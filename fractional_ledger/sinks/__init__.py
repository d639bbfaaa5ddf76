"""Output sinks for publishing ledger events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fractional_ledger.sinks.console import ConsoleSink
from fractional_ledger.sinks.json_file import JsonFileSink
from fractional_ledger.sinks.kafka import KafkaSink

if TYPE_CHECKING:
    from fractional_ledger.config import LedgerConfig


def build_sinks(config: LedgerConfig) -> list[Any]:
    """Create the sinks named in ``config.events.sinks``."""
    sinks: list[Any] = []
    for name in config.events.sinks:
        if name == "console":
            sinks.append(ConsoleSink(pretty=config.output.pretty_json))
        elif name == "json":
            sinks.append(JsonFileSink(config.output.event_output_dir, pretty=config.output.pretty_json))
        elif name == "kafka":
            sinks.append(KafkaSink(config.kafka))
    return sinks


__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink", "build_sinks"]
