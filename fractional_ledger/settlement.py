"""Settlement of share purchases through an external value-transfer primitive."""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Protocol

from fractional_ledger.events import EventLog
from fractional_ledger.exceptions import (
    PaymentError,
    ReentrancyError,
    SettlementError,
    StateError,
    ValidationError,
)
from fractional_ledger.models import EventType
from fractional_ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class ValueTransfer(Protocol):
    """Outbound value-transfer primitive.

    ``transfer`` either moves ``amount`` to ``recipient`` or raises and
    changes nothing. Implementations may call back into the ledger before
    returning.
    """

    def transfer(self, recipient: str, amount: int) -> None: ...


class Treasury:
    """In-memory value-transfer primitive.

    Keeps the amount received by each identity. Recipients can be made to
    reject payments, or given a hook that runs on receipt (before the
    transfer returns), which is how reentrant callbacks are simulated.
    """

    def __init__(self) -> None:
        self.balances: dict[str, int] = {}
        self.transfers: list[tuple[str, int]] = []
        self._rejecting: set[str] = set()
        self._hooks: dict[str, Callable[[str, int], None]] = {}

    def reject(self, identity: str) -> None:
        """Make every transfer to ``identity`` fail."""
        self._rejecting.add(identity)

    def accept(self, identity: str) -> None:
        """Undo ``reject``."""
        self._rejecting.discard(identity)

    def on_receive(self, identity: str, hook: Callable[[str, int], None] | None) -> None:
        """Run ``hook(identity, amount)`` whenever ``identity`` is paid."""
        if hook is None:
            self._hooks.pop(identity, None)
        else:
            self._hooks[identity] = hook

    def balance_of(self, identity: str) -> int:
        return self.balances.get(identity, 0)

    def transfer(self, recipient: str, amount: int) -> None:
        if recipient in self._rejecting:
            raise SettlementError(f"Recipient {recipient} rejected transfer of {amount}")

        hook = self._hooks.get(recipient)
        if hook is not None:
            hook(recipient, amount)

        self.balances[recipient] = self.balances.get(recipient, 0) + amount
        self.transfers.append((recipient, amount))


class SettlementAdapter:
    """Computes costs and moves value for purchases.

    Holds the ledger's single non-reentrant lock; every operation that may
    trigger an outbound transfer runs inside ``lock()``.

    Parameters
    ----------
    gateway : ValueTransfer
        External value-transfer primitive.
    store : LedgerStore
        Ledger store, used for deferred refund balances.
    events : EventLog
        Log receiving refund events.
    """

    def __init__(self, gateway: ValueTransfer, store: LedgerStore, events: EventLog) -> None:
        self.gateway = gateway
        self._store = store
        self._events = events
        self._locked = False

    @property
    def locked(self) -> bool:
        """Whether a settlement-performing operation is in progress."""
        return self._locked

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Hold the reentrancy lock for the duration of the block.

        Raises
        ------
        ReentrancyError
            If the lock is already held.
        """
        if self._locked:
            logger.warning("Rejected reentrant call while settlement lock is held")
            raise ReentrancyError("Reentrant call rejected")
        self._locked = True
        try:
            yield
        finally:
            self._locked = False

    @staticmethod
    def compute_cost(shares: int, price_per_share: int) -> int:
        """Total cost of ``shares`` at ``price_per_share``."""
        if shares < 0 or price_per_share < 0:
            raise ValidationError("Shares and price must be non-negative")
        return shares * price_per_share

    def collect_and_forward(
        self,
        payer: str,
        payee: str,
        required_amount: int,
        tendered_amount: int,
    ) -> int:
        """Forward the required amount to the payee and refund any surplus.

        A failed forward leg raises SettlementError and the enclosing
        operation must roll back. A failed refund leg does not undo a sale
        whose seller was paid; the surplus is kept as a pending refund the
        payer can claim later.

        Returns
        -------
        int
            Amount refunded to the payer right away.
        """
        if not self._locked:
            raise StateError("Settlement must run under the reentrancy lock")
        if tendered_amount < required_amount:
            raise PaymentError(f"Tendered {tendered_amount} is below required {required_amount}")

        try:
            self.gateway.transfer(payee, required_amount)
        except Exception as e:
            logger.error("Forward of %d to %s failed: %s", required_amount, payee, e)
            raise SettlementError(f"Payment of {required_amount} to {payee} failed") from e

        surplus = tendered_amount - required_amount
        if surplus == 0:
            return 0

        try:
            self.gateway.transfer(payer, surplus)
        except Exception as e:
            logger.warning("Refund of %d to %s failed, deferring: %s", surplus, payer, e)
            self._store.credit_pending_refund(payer, surplus)
            self._events.emit(EventType.REFUND_DEFERRED, payer, payer=payer, amount=surplus)
            return 0

        logger.debug("Refunded %d to %s", surplus, payer)
        return surplus

    def pending_refund(self, identity: str) -> int:
        """Refund owed to ``identity`` from earlier failed refund legs."""
        return self._store.get_pending_refund(identity)

    def claim_refund(self, caller: str) -> int:
        """Pay out the caller's pending refund.

        Raises
        ------
        StateError
            If nothing is owed.
        SettlementError
            If the transfer fails; the balance stays owed.
        """
        with self.lock(), self._store.transaction(), self._events.transaction():
            amount = self._store.get_pending_refund(caller)
            if amount == 0:
                raise StateError(f"No pending refund for {caller}")

            self._store.clear_pending_refund(caller)
            try:
                self.gateway.transfer(caller, amount)
            except Exception as e:
                logger.error("Refund claim of %d by %s failed: %s", amount, caller, e)
                raise SettlementError(f"Refund of {amount} to {caller} failed") from e

            self._events.emit(EventType.REFUND_CLAIMED, caller, payer=caller, amount=amount)
            logger.info("Refund of %d claimed by %s", amount, caller)
            return amount
