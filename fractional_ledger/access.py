"""Capability checks consulted before every mutating operation."""

import logging
from contextlib import contextmanager
from typing import Iterator

from fractional_ledger.events import EventLog
from fractional_ledger.exceptions import AuthorizationError, StateError, ValidationError
from fractional_ledger.models import EventType
from fractional_ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class AccessGate:
    """Administrator identity and registry-wide pause flag.

    Both values live in the ledger store, so a pause or handover made
    inside a failing operation is undone together with it.

    Parameters
    ----------
    administrator : str
        Identity allowed to call restricted operations.
    events : EventLog
        Log receiving pause and administration events.
    store : LedgerStore | None
        Store holding the gate state (default: a private store).
    """

    def __init__(
        self, administrator: str, events: EventLog, store: LedgerStore | None = None
    ) -> None:
        if not administrator:
            raise ValidationError("Administrator identity must not be empty")
        self._store = store if store is not None else LedgerStore()
        self._store.set_administrator(administrator)
        self._events = events

    @property
    def administrator(self) -> str:
        """Current registry administrator."""
        return self._store.administrator

    @property
    def paused(self) -> bool:
        """Whether purchases and transfers are currently suspended."""
        return self._store.paused

    def is_administrator(self, caller: str) -> bool:
        return caller == self._store.administrator

    def require_administrator(self, caller: str) -> None:
        """Raise AuthorizationError unless ``caller`` is the administrator."""
        if not self.is_administrator(caller):
            logger.warning("Rejected restricted call from %s", caller)
            raise AuthorizationError(f"Caller {caller} is not the administrator")

    def require_not_paused(self) -> None:
        """Raise StateError while the registry is paused."""
        if self._store.paused:
            raise StateError("Registry is paused")

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        with self._store.transaction(), self._events.transaction():
            yield

    def pause(self, caller: str) -> None:
        """Suspend purchases and transfers."""
        self.require_administrator(caller)
        self.require_not_paused()

        with self._atomic():
            self._store.set_paused(True)
            self._events.emit(EventType.PAUSED, caller, account=caller)
        logger.info("Registry paused by %s", caller)

    def unpause(self, caller: str) -> None:
        """Resume purchases and transfers."""
        self.require_administrator(caller)
        if not self._store.paused:
            raise StateError("Registry is not paused")

        with self._atomic():
            self._store.set_paused(False)
            self._events.emit(EventType.UNPAUSED, caller, account=caller)
        logger.info("Registry unpaused by %s", caller)

    def transfer_administration(self, caller: str, new_administrator: str) -> None:
        """Hand the administrator capability to another identity.

        Properties already tokenized keep their asset owner.
        """
        self.require_administrator(caller)
        if not new_administrator or not new_administrator.strip():
            raise ValidationError("New administrator identity must not be empty")

        previous = self._store.administrator
        with self._atomic():
            self._store.set_administrator(new_administrator)
            self._events.emit(
                EventType.ADMINISTRATION_TRANSFERRED,
                new_administrator,
                previous_administrator=previous,
                new_administrator=new_administrator,
            )
        logger.info("Administration transferred from %s to %s", previous, new_administrator)
