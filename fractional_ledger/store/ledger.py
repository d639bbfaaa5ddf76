"""Ledger state store with journaled transactions."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

from fractional_ledger.exceptions import NotFoundError, StateError
from fractional_ledger.models import Property, ShareOwnership

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class LedgerStore:
    """In-memory store for properties, holdings and investor rosters.

    All mutation goes through the ``save_*``/roster methods so that an open
    transaction can journal the prior value of every touched entry and
    restore it if the operation fails.
    """

    # Primary tables
    properties: dict[int, Property] = field(default_factory=dict)
    ownerships: dict[tuple[int, str], ShareOwnership] = field(default_factory=dict)
    pending_refunds: dict[str, int] = field(default_factory=dict)

    # Roster per property: list of investors plus position index for O(1) removal
    _rosters: dict[int, list[str]] = field(default_factory=dict)
    _roster_positions: dict[int, dict[str, int]] = field(default_factory=dict)

    _last_id: int = 0

    # Access state: registry administrator and pause flag
    administrator: str = ""
    paused: bool = False

    # Transaction journals, one per open level: first-touch prior values by entry
    _journals: list[dict[tuple, Any]] = field(default_factory=list)

    # --- Transactions ---

    @contextmanager
    def transaction(self) -> Iterator["LedgerStore"]:
        """Group mutations into one all-or-nothing unit.

        Transactions nest: a failing inner transaction undoes only its own
        mutations, a successful one hands them to the enclosing level.
        """
        self._journals.append({})
        try:
            yield self
        except BaseException:
            self._rollback(self._journals.pop())
            raise
        else:
            journal = self._journals.pop()
            if self._journals:
                parent = self._journals[-1]
                for key, value in journal.items():
                    parent.setdefault(key, value)

    @property
    def in_transaction(self) -> bool:
        """Whether a transaction is currently open."""
        return bool(self._journals)

    def _record(self, key: tuple, value: Any) -> None:
        if self._journals and key not in self._journals[-1]:
            self._journals[-1][key] = value

    def _rollback(self, journal: dict[tuple, Any]) -> None:
        for key, value in journal.items():
            kind = key[0]
            if kind == "last_id":
                self._last_id = value
            elif kind == "gate":
                setattr(self, key[1], value)
            elif kind == "property":
                if value is _MISSING:
                    self.properties.pop(key[1], None)
                else:
                    self.properties[key[1]] = value
            elif kind == "ownership":
                if value is _MISSING:
                    self.ownerships.pop(key[1], None)
                else:
                    self.ownerships[key[1]] = value
            elif kind == "refund":
                if value is _MISSING:
                    self.pending_refunds.pop(key[1], None)
                else:
                    self.pending_refunds[key[1]] = value
            elif kind == "roster":
                if value is _MISSING:
                    self._rosters.pop(key[1], None)
                    self._roster_positions.pop(key[1], None)
                else:
                    members, positions = value
                    self._rosters[key[1]] = members
                    self._roster_positions[key[1]] = positions
        logger.debug("Rolled back %d journaled entries", len(journal))

    # --- Access state ---

    def set_administrator(self, identity: str) -> None:
        """Replace the registry administrator."""
        self._record(("gate", "administrator"), self.administrator)
        self.administrator = identity

    def set_paused(self, paused: bool) -> None:
        """Set the registry-wide pause flag."""
        self._record(("gate", "paused"), self.paused)
        self.paused = paused

    # --- Properties ---

    @property
    def last_property_id(self) -> int:
        """Id of the most recently created property (0 when none)."""
        return self._last_id

    def next_property_id(self) -> int:
        """Allocate the next property id."""
        self._record(("last_id",), self._last_id)
        self._last_id += 1
        return self._last_id

    def add_property(self, prop: Property) -> None:
        """Add a newly created property and its empty roster."""
        if prop.property_id in self.properties:
            raise StateError(f"Property {prop.property_id} already exists")

        self._record(("property", prop.property_id), _MISSING)
        self._record(("roster", prop.property_id), _MISSING)
        self.properties[prop.property_id] = prop
        self._rosters[prop.property_id] = []
        self._roster_positions[prop.property_id] = {}

    def save_property(self, prop: Property) -> None:
        """Replace an existing property record."""
        previous = self.require_property(prop.property_id)
        self._record(("property", prop.property_id), previous)
        self.properties[prop.property_id] = prop

    def require_property(self, property_id: int) -> Property:
        """Get a property or raise NotFoundError."""
        prop = self.properties.get(property_id)
        if prop is None:
            raise NotFoundError(f"Property {property_id} not found")
        return prop

    # --- Ownership ---

    def get_ownership(self, property_id: int, investor: str) -> ShareOwnership | None:
        """Get the ownership record of an investor, if one was ever created."""
        return self.ownerships.get((property_id, investor))

    def save_ownership(self, ownership: ShareOwnership) -> None:
        """Create or replace an ownership record."""
        key = (ownership.property_id, ownership.investor)
        self._record(("ownership", key), self.ownerships.get(key, _MISSING))
        self.ownerships[key] = ownership

    def get_investor_ownerships(self, investor: str) -> list[ShareOwnership]:
        """Get every ownership record of an investor, including zeroed ones."""
        return [o for (_, holder), o in self.ownerships.items() if holder == investor]

    # --- Deferred refunds ---

    def get_pending_refund(self, identity: str) -> int:
        """Amount owed to an identity from failed refund legs."""
        return self.pending_refunds.get(identity, 0)

    def credit_pending_refund(self, identity: str, amount: int) -> None:
        """Add to the amount owed to an identity."""
        self._record(("refund", identity), self.pending_refunds.get(identity, _MISSING))
        self.pending_refunds[identity] = self.pending_refunds.get(identity, 0) + amount

    def clear_pending_refund(self, identity: str) -> None:
        """Forget the amount owed to an identity."""
        if identity in self.pending_refunds:
            self._record(("refund", identity), self.pending_refunds[identity])
            del self.pending_refunds[identity]

    # --- Rosters ---

    def get_roster(self, property_id: int) -> list[str]:
        """Get a copy of the investor roster of a property."""
        return list(self._rosters.get(property_id, []))

    def in_roster(self, property_id: int, investor: str) -> bool:
        """Check roster membership."""
        return investor in self._roster_positions.get(property_id, {})

    def add_to_roster(self, property_id: int, investor: str) -> None:
        """Append an investor to a property roster."""
        self.require_property(property_id)
        if self.in_roster(property_id, investor):
            raise StateError(f"Investor {investor} already in roster of property {property_id}")

        self._touch_roster(property_id)
        members = self._rosters[property_id]
        self._roster_positions[property_id][investor] = len(members)
        members.append(investor)

    def remove_from_roster(self, property_id: int, investor: str) -> None:
        """Remove an investor by moving the last entry into its slot.

        Roster order is not preserved.
        """
        if not self.in_roster(property_id, investor):
            raise StateError(f"Investor {investor} not in roster of property {property_id}")

        self._touch_roster(property_id)
        members = self._rosters[property_id]
        positions = self._roster_positions[property_id]

        index = positions.pop(investor)
        last = members.pop()
        if last != investor:
            members[index] = last
            positions[last] = index

    def _touch_roster(self, property_id: int) -> None:
        key = ("roster", property_id)
        if self._journals and key not in self._journals[-1]:
            self._journals[-1][key] = (
                list(self._rosters[property_id]),
                dict(self._roster_positions[property_id]),
            )

    def total_holdings(self, property_id: int) -> int:
        """Sum of shares held by the roster of a property."""
        return sum(
            self.ownerships[(property_id, investor)].shares
            for investor in self._rosters.get(property_id, [])
        )

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "properties": len(self.properties),
            "active_properties": sum(1 for p in self.properties.values() if p.is_active),
            "ownerships": len(self.ownerships),
            "holders": sum(len(members) for members in self._rosters.values()),
        }
