"""Kafka sink for streaming ledger events."""

import logging
import time
from dataclasses import dataclass
from typing import Any

from confluent_kafka import Producer

from fractional_ledger.config import KafkaConfig
from fractional_ledger.models import LedgerEvent
from fractional_ledger.sinks.serialization import to_json

logger = logging.getLogger(__name__)

CLOUDEVENTS_SPEC_VERSION = "1.0"
CLOUDEVENTS_SOURCE = "fractional-ledger"


@dataclass
class ProducerStats:
    """Delivery counters for one sink."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0
    start_time: float | None = None
    end_time: float | None = None

    @property
    def success_rate(self) -> float:
        """Share of acknowledged messages that were delivered."""
        acknowledged = self.delivered + self.failed
        return self.delivered / acknowledged if acknowledged else 0.0

    @property
    def throughput(self) -> float:
        """Messages sent per second between first and last batch."""
        if self.start_time is None or self.end_time is None:
            return 0.0
        elapsed = self.end_time - self.start_time
        return self.sent / elapsed if elapsed > 0 else 0.0


class KafkaSink:
    """Publish ledger events to a Kafka topic.

    Messages are keyed by event subject so all events of one property land
    on the same partition in sequence order. Events carry CloudEvents
    binary-mode headers (``ce_id`` is the ledger sequence number).

    Parameters
    ----------
    config : KafkaConfig | str
        Producer configuration or a bootstrap servers string.
    use_cloudevents : bool
        Attach CloudEvents headers.
    """

    def __init__(self, config: KafkaConfig | str, use_cloudevents: bool = True) -> None:
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.use_cloudevents = use_cloudevents
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats()

    def _on_delivery(self, err: Any, msg: Any) -> None:
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    @staticmethod
    def key_for(record: Any) -> str | None:
        """Partition key: the event subject, if the record has one."""
        if isinstance(record, LedgerEvent):
            return record.subject
        if isinstance(record, dict):
            return record.get("subject")
        return None

    @staticmethod
    def headers_for(record: Any) -> list[tuple[str, bytes]]:
        """CloudEvents headers for a record."""
        headers = [
            ("ce_specversion", CLOUDEVENTS_SPEC_VERSION.encode()),
            ("ce_source", CLOUDEVENTS_SOURCE.encode()),
            ("content-type", b"application/json"),
        ]
        if isinstance(record, LedgerEvent):
            headers += [
                ("ce_id", str(record.sequence).encode()),
                ("ce_type", record.event_type.value.encode()),
                ("ce_time", record.event_time.isoformat().encode()),
                ("ce_subject", record.subject.encode()),
            ]
        return headers

    def send(self, topic: str, record: Any) -> None:
        """Queue a single record for delivery."""
        key = self.key_for(record)
        self.producer.produce(
            topic=topic,
            key=key.encode("utf-8") if key else None,
            value=to_json(record).encode("utf-8"),
            headers=self.headers_for(record) if self.use_cloudevents else None,
            on_delivery=self._on_delivery,
        )
        self.stats.sent += 1
        self.producer.poll(0)

    def write_batch(self, topic: str, records: list[Any]) -> None:
        """Send a batch and wait until the broker has acknowledged it."""
        if self.stats.start_time is None:
            self.stats.start_time = time.time()

        for record in records:
            self.send(topic, record)
        self.flush()

        self.stats.end_time = time.time()
        logger.debug(
            "Batch of %d to %s complete (sent=%d, delivered=%d, failed=%d)",
            len(records),
            topic,
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )

    def flush(self, timeout: float = 30.0) -> None:
        """Wait for outstanding messages; log those still queued."""
        remaining = self.producer.flush(timeout)
        if remaining:
            logger.warning("%d messages still queued after %.1fs flush", remaining, timeout)

    def close(self) -> None:
        """Flush and log delivery totals."""
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
