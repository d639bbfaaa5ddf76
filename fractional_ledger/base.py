"""Base class and input checks shared by ledger components."""

from __future__ import annotations

from abc import ABC
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator

from fractional_ledger.access import AccessGate
from fractional_ledger.events import EventLog
from fractional_ledger.exceptions import ValidationError
from fractional_ledger.settlement import SettlementAdapter
from fractional_ledger.store import LedgerStore


def require_amount(name: str, value: Any, positive: bool = False) -> int:
    """Check that ``value`` is an integer amount and return it.

    Parameters
    ----------
    name : str
        Argument name used in the error message.
    value : Any
        Value to check. Booleans are rejected.
    positive : bool
        Require ``value > 0`` instead of ``value >= 0``.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if positive and value <= 0:
        raise ValidationError(f"{name} must be greater than zero")
    if value < 0:
        raise ValidationError(f"{name} must not be negative")
    return value


def require_identity(name: str, value: Any) -> str:
    """Check that ``value`` is a non-blank identity string and return it."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty identity")
    return value


class LedgerComponent(ABC):
    """Base class for components operating on the shared ledger state.

    Every component of one ledger receives the same store, access gate,
    settlement adapter and event log.

    Parameters
    ----------
    store : LedgerStore
        Process-wide state store.
    gate : AccessGate
        Administrator and pause checks.
    settlement : SettlementAdapter
        Value transfers and the reentrancy lock.
    events : EventLog
        Append-only event log.
    clock : Callable[[], datetime] | None
        Time source for record timestamps (default: the event log clock).
    """

    def __init__(
        self,
        store: LedgerStore,
        gate: AccessGate,
        settlement: SettlementAdapter,
        events: EventLog,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.gate = gate
        self.settlement = settlement
        self.events = events
        self.clock = clock or events.clock

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        """Commit store mutations and staged events together, or neither."""
        with self.store.transaction(), self.events.transaction():
            yield
