"""Per-investor share holdings: purchases, transfers and rosters."""

import dataclasses
import logging

from fractional_ledger.base import LedgerComponent, require_amount, require_identity
from fractional_ledger.exceptions import PaymentError, StateError, ValidationError
from fractional_ledger.models import EventType, Property, ShareOwnership

logger = logging.getLogger(__name__)


class ShareLedger(LedgerComponent):
    """Moves shares between the unsold inventory and investors.

    After every operation, for every property::

        available_shares + withdrawn_shares + sum(holdings) == total_shares

    and the roster holds exactly the investors with a nonzero balance.
    """

    def purchase_shares(
        self,
        caller: str,
        property_id: int,
        shares: int,
        tendered_value: int,
    ) -> int:
        """Buy ``shares`` unsold shares of a property.

        Ledger state is updated before any value moves; the cost is then
        forwarded to the property owner and the surplus refunded to the
        buyer. If the forward fails, the whole purchase is rolled back.

        Parameters
        ----------
        caller : str
            Buyer identity.
        property_id : int
            Property to buy into.
        shares : int
            Number of shares, at most the property's available shares.
        tendered_value : int
            Value attached to the purchase, at least ``shares * price_per_share``.

        Returns
        -------
        int
            Total cost charged.
        """
        with self.settlement.lock():
            self.gate.require_not_paused()
            require_identity("buyer", caller)
            require_amount("shares", shares)
            require_amount("tendered_value", tendered_value)

            with self._atomic():
                prop = self.store.require_property(property_id)
                if not prop.is_active:
                    raise StateError(f"Property {property_id} is not active")
                if shares == 0 or shares > prop.available_shares:
                    raise ValidationError(
                        f"Cannot buy {shares} shares of property {property_id} "
                        f"({prop.available_shares} available)"
                    )

                cost = self.settlement.compute_cost(shares, prop.price_per_share)
                if tendered_value < cost:
                    raise PaymentError(f"Tendered {tendered_value} is below cost {cost}")

                self.store.save_property(
                    dataclasses.replace(prop, available_shares=prop.available_shares - shares)
                )
                self._credit(prop, caller, shares, cost)
                self.events.emit(
                    EventType.SHARES_PURCHASED,
                    property_id,
                    property_id=property_id,
                    buyer=caller,
                    shares=shares,
                    cost=cost,
                )

                refunded = self.settlement.collect_and_forward(
                    caller, prop.owner, cost, tendered_value
                )

        logger.info(
            "%s bought %d shares of property %d for %d (refunded %d)",
            caller,
            shares,
            property_id,
            cost,
            refunded,
        )
        return cost

    def transfer_shares(self, caller: str, property_id: int, to: str, shares: int) -> None:
        """Move ``shares`` from the caller to ``to``. No value changes hands.

        The recipient's booked purchase price grows by
        ``shares * price_per_share``, whether the holding is new or already
        exists. The sender's booked price is left unchanged.
        """
        self.gate.require_not_paused()

        with self._atomic():
            prop = self.store.require_property(property_id)
            require_identity("recipient", to)
            if to == caller:
                raise ValidationError("Cannot transfer shares to yourself")
            require_amount("shares", shares, positive=True)

            sender = self.store.get_ownership(property_id, caller)
            held = sender.shares if sender is not None else 0
            if held < shares:
                raise ValidationError(
                    f"{caller} holds {held} shares of property {property_id}, cannot transfer {shares}"
                )

            remaining = held - shares
            self.store.save_ownership(dataclasses.replace(sender, shares=remaining))
            if remaining == 0:
                self.store.remove_from_roster(property_id, caller)

            booked = self.settlement.compute_cost(shares, prop.price_per_share)
            self._credit(prop, to, shares, booked)
            self.events.emit(
                EventType.SHARES_TRANSFERRED,
                property_id,
                property_id=property_id,
                **{"from": caller, "to": to},
                shares=shares,
            )

        logger.info("%s transferred %d shares of property %d to %s", caller, shares, property_id, to)

    def _credit(self, prop: Property, investor: str, shares: int, amount: int) -> None:
        """Add shares to a holding, starting a fresh one if the balance is zero."""
        existing = self.store.get_ownership(prop.property_id, investor)
        if existing is None or existing.shares == 0:
            self.store.save_ownership(
                ShareOwnership(
                    property_id=prop.property_id,
                    investor=investor,
                    shares=shares,
                    purchase_price=amount,
                    purchase_date=self.clock(),
                )
            )
            self.store.add_to_roster(prop.property_id, investor)
        else:
            self.store.save_ownership(
                dataclasses.replace(
                    existing,
                    shares=existing.shares + shares,
                    purchase_price=existing.purchase_price + amount,
                )
            )

    def get_share_ownership(self, property_id: int, investor: str) -> ShareOwnership:
        """Ownership record of an investor; zero-valued if there is none."""
        self.store.require_property(property_id)
        ownership = self.store.get_ownership(property_id, investor)
        return ownership or ShareOwnership.empty(property_id, investor)

    def get_investor_shares(self, property_id: int, investor: str) -> int:
        return self.get_share_ownership(property_id, investor).shares

    def get_property_investors(self, property_id: int) -> list[str]:
        """Investors currently holding shares, in no particular order."""
        self.store.require_property(property_id)
        return self.store.get_roster(property_id)

    def get_investor_portfolio(self, investor: str) -> dict[int, ShareOwnership]:
        """Nonzero holdings of an investor keyed by property id."""
        return {
            o.property_id: o
            for o in self.store.get_investor_ownerships(investor)
            if o.shares > 0
        }
