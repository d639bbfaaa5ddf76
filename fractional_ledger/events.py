"""Append-only event log with staged commits and sink fan-out."""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Protocol

from fractional_ledger.models import EventType, LedgerEvent

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Anything that accepts batches of records for a topic."""

    def write_batch(self, topic: str, records: list[Any]) -> None: ...


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class EventLog:
    """Ordered, append-only record of every state-changing operation.

    Events emitted inside ``transaction()`` are staged and only become part
    of the log when the outermost transaction completes; if it raises they
    are discarded. Committed events are published to every subscribed sink.

    Parameters
    ----------
    topic : str
        Topic name passed to sinks.
    sinks : list[EventSink] | None
        Initial subscribers.
    clock : Callable[[], datetime] | None
        Time source for ``event_time`` (default: UTC now).
    """

    def __init__(
        self,
        topic: str = "ledger.events",
        sinks: list[EventSink] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.topic = topic
        self.clock = clock or utc_now
        self.publish_failures = 0
        self._sinks: list[EventSink] = list(sinks or [])
        self._events: list[LedgerEvent] = []
        self._staged: list[tuple[EventType, str, datetime, dict]] = []
        self._savepoints: list[int] = []

    def subscribe(self, sink: EventSink) -> None:
        """Publish future commits to ``sink``."""
        self._sinks.append(sink)

    @property
    def sinks(self) -> list[EventSink]:
        """Subscribed sinks."""
        return list(self._sinks)

    def emit(self, event_type: EventType, subject: Any, **data: Any) -> None:
        """Record an event, staging it while a transaction is open."""
        entry = (event_type, str(subject), self.clock(), data)
        if self._savepoints:
            self._staged.append(entry)
        else:
            self._commit([entry])

    @contextmanager
    def transaction(self) -> Iterator["EventLog"]:
        """Stage events until the outermost transaction completes.

        A failing inner transaction drops only the events it staged.
        """
        self._savepoints.append(len(self._staged))
        try:
            yield self
        except BaseException:
            mark = self._savepoints.pop()
            logger.debug("Discarding %d staged events", len(self._staged) - mark)
            del self._staged[mark:]
            raise
        else:
            self._savepoints.pop()
            if not self._savepoints:
                staged, self._staged = self._staged, []
                self._commit(staged)

    def _commit(self, entries: list[tuple[EventType, str, datetime, dict]]) -> None:
        if not entries:
            return

        committed = []
        for event_type, subject, event_time, data in entries:
            event = LedgerEvent(
                sequence=len(self._events) + 1,
                event_type=event_type,
                event_time=event_time,
                subject=subject,
                data=data,
            )
            self._events.append(event)
            committed.append(event)
            logger.debug("Event #%d %s subject=%s", event.sequence, event_type.value, subject)

        self._publish(committed)

    def _publish(self, events: list[LedgerEvent]) -> None:
        # State is already committed; a failing sink must not undo it.
        # The events stay in the log and can be replayed into the sink.
        for sink in self._sinks:
            try:
                sink.write_batch(self.topic, events)
            except Exception:
                self.publish_failures += 1
                logger.exception(
                    "Failed to publish events #%d-#%d to %s",
                    events[0].sequence,
                    events[-1].sequence,
                    type(sink).__name__,
                )

    def events(
        self,
        property_id: int | None = None,
        event_type: EventType | None = None,
    ) -> list[LedgerEvent]:
        """Get committed events, optionally filtered by property or type."""
        result = self._events
        if property_id is not None:
            subject = str(property_id)
            result = [e for e in result if e.subject == subject]
        if event_type is not None:
            result = [e for e in result if e.event_type == event_type]
        return list(result)

    def replay(self, sink: EventSink, from_sequence: int = 1) -> int:
        """Write committed events from ``from_sequence`` onward to ``sink``.

        Returns
        -------
        int
            Number of events written.
        """
        events = self._events[max(from_sequence, 1) - 1 :]
        if events:
            sink.write_batch(self.topic, events)
        logger.info("Replayed %d events to %s", len(events), type(sink).__name__)
        return len(events)

    @property
    def last_sequence(self) -> int:
        """Sequence number of the most recent committed event."""
        return len(self._events)

    def __len__(self) -> int:
        return len(self._events)
