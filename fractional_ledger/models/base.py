"""Base models shared across the ledger."""

from dataclasses import dataclass, field
from datetime import datetime

from fractional_ledger.models.enums import EventType


@dataclass(frozen=True)
class LedgerEvent:
    """Standard event envelope for the append-only event log.

    ``sequence`` follows the global operation order and is assigned when
    the emitting operation commits. ``subject`` is the property id for
    property-level events and the account for account-level ones.
    """

    sequence: int
    event_type: EventType
    event_time: datetime
    subject: str
    data: dict = field(default_factory=dict)
