"""Fractional-ownership ledger: one store, one gate, one lock, one event log."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from fractional_ledger.access import AccessGate
from fractional_ledger.events import EventLog, EventSink
from fractional_ledger.exceptions import StateError
from fractional_ledger.models import LedgerEvent, Property, ShareOwnership
from fractional_ledger.registry import PropertyRegistry
from fractional_ledger.settlement import SettlementAdapter, Treasury, ValueTransfer
from fractional_ledger.shares import ShareLedger
from fractional_ledger.store import LedgerStore

if TYPE_CHECKING:
    from fractional_ledger.config import LedgerConfig

logger = logging.getLogger(__name__)


class FractionalLedger:
    """Operation surface of the ledger.

    Wires a single ``LedgerStore`` into the access gate, the settlement
    adapter, the property registry and the share ledger.

    Parameters
    ----------
    administrator : str
        Registry administrator identity.
    gateway : ValueTransfer | None
        Outbound value-transfer primitive (default: in-memory ``Treasury``).
    sinks : list[EventSink] | None
        Event sinks to publish committed events to.
    topic : str
        Topic name used when publishing events.
    clock : Callable[[], datetime] | None
        Time source for records and events.
    """

    def __init__(
        self,
        administrator: str,
        gateway: ValueTransfer | None = None,
        sinks: list[EventSink] | None = None,
        topic: str = "ledger.events",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = LedgerStore()
        self.events = EventLog(topic=topic, sinks=sinks, clock=clock)
        self.gate = AccessGate(administrator, self.events, self.store)
        self.gateway = gateway if gateway is not None else Treasury()
        self.settlement = SettlementAdapter(self.gateway, self.store, self.events)
        self.registry = PropertyRegistry(self.store, self.gate, self.settlement, self.events)
        self.shares = ShareLedger(self.store, self.gate, self.settlement, self.events)

    @classmethod
    def from_config(
        cls,
        config: LedgerConfig,
        gateway: ValueTransfer | None = None,
    ) -> "FractionalLedger":
        """Build a ledger and its event sinks from configuration."""
        from fractional_ledger.sinks import build_sinks

        config.validate()
        ledger = cls(
            administrator=config.administrator,
            gateway=gateway,
            sinks=build_sinks(config),
            topic=config.events.topic,
        )
        logger.info(
            "Ledger ready: administrator=%s, sinks=%s",
            config.administrator,
            config.events.sinks or "none",
        )
        return ledger

    # --- Access ---

    @property
    def administrator(self) -> str:
        return self.gate.administrator

    @property
    def paused(self) -> bool:
        return self.gate.paused

    def pause(self, caller: str) -> None:
        self.gate.pause(caller)

    def unpause(self, caller: str) -> None:
        self.gate.unpause(caller)

    def transfer_administration(self, caller: str, new_administrator: str) -> None:
        self.gate.transfer_administration(caller, new_administrator)

    # --- Registry ---

    def tokenize_property(
        self,
        caller: str,
        address: str,
        total_value: int,
        total_shares: int,
        metadata_uri: str = "",
        owner: str | None = None,
    ) -> int:
        return self.registry.tokenize_property(
            caller, address, total_value, total_shares, metadata_uri, owner
        )

    def deactivate_property(self, caller: str, property_id: int) -> None:
        self.registry.deactivate_property(caller, property_id)

    def withdraw_unsold_shares(self, caller: str, property_id: int) -> int:
        return self.registry.withdraw_unsold_shares(caller, property_id)

    def update_metadata_uri(self, caller: str, property_id: int, metadata_uri: str) -> None:
        self.registry.update_metadata_uri(caller, property_id, metadata_uri)

    def get_property(self, property_id: int) -> Property:
        return self.registry.get_property(property_id)

    def get_current_id(self) -> int:
        return self.registry.get_current_id()

    def list_properties(self, active_only: bool = False) -> list[Property]:
        return self.registry.list_properties(active_only)

    # --- Shares ---

    def purchase_shares(
        self, caller: str, property_id: int, shares: int, tendered_value: int
    ) -> int:
        return self.shares.purchase_shares(caller, property_id, shares, tendered_value)

    def transfer_shares(self, caller: str, property_id: int, to: str, shares: int) -> None:
        self.shares.transfer_shares(caller, property_id, to, shares)

    def get_share_ownership(self, property_id: int, investor: str) -> ShareOwnership:
        return self.shares.get_share_ownership(property_id, investor)

    def get_investor_shares(self, property_id: int, investor: str) -> int:
        return self.shares.get_investor_shares(property_id, investor)

    def get_property_investors(self, property_id: int) -> list[str]:
        return self.shares.get_property_investors(property_id)

    def get_investor_portfolio(self, investor: str) -> dict[int, ShareOwnership]:
        return self.shares.get_investor_portfolio(investor)

    # --- Settlement ---

    def pending_refund(self, identity: str) -> int:
        return self.settlement.pending_refund(identity)

    def claim_refund(self, caller: str) -> int:
        return self.settlement.claim_refund(caller)

    # --- Events & checks ---

    def get_events(self, property_id: int | None = None) -> list[LedgerEvent]:
        return self.events.events(property_id=property_id)

    def check_invariants(self) -> None:
        """Verify share conservation and roster consistency for every property.

        Raises
        ------
        StateError
            On the first violation found.
        """
        for prop in self.store.properties.values():
            pid = prop.property_id
            held = self.store.total_holdings(pid)
            if prop.available_shares + prop.withdrawn_shares + held != prop.total_shares:
                raise StateError(
                    f"Property {pid}: {prop.available_shares} available + "
                    f"{prop.withdrawn_shares} withdrawn + {held} held != {prop.total_shares}"
                )

            roster = self.store.get_roster(pid)
            if len(roster) != len(set(roster)):
                raise StateError(f"Property {pid}: duplicate roster entries")

            holders = {
                investor
                for (owned_pid, investor), o in self.store.ownerships.items()
                if owned_pid == pid and o.shares > 0
            }
            if holders != set(roster):
                raise StateError(f"Property {pid}: roster does not match nonzero holdings")

    def summary(self) -> dict[str, int]:
        """Return summary counts of ledger state."""
        return {**self.store.summary(), "events": len(self.events)}
