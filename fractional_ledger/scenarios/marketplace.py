"""Marketplace scenario: random trading activity against one ledger."""

import logging
import random
from typing import Any

from fractional_ledger.exceptions import LedgerError
from fractional_ledger.generators import InvestorGenerator, PropertyGenerator
from fractional_ledger.ledger import FractionalLedger
from fractional_ledger.models import Property
from fractional_ledger.settlement import Treasury

logger = logging.getLogger(__name__)


class MarketplaceScenario:
    """Simulate a fractional-ownership marketplace.

    This scenario creates:
    - Properties tokenized by the administrator on behalf of sellers
    - Investors buying shares, sometimes overpaying to exercise refunds
    - Peer-to-peer share transfers
    - Occasional deactivation followed by withdrawal of unsold shares

    Invariants are checked after every operation; a violation aborts the
    run with ``StateError``.
    """

    def __init__(
        self,
        num_properties: int = 5,
        num_investors: int = 20,
        num_operations: int = 200,
        deactivation_rate: float = 0.05,
        seed: int | None = None,
        administrator: str = "admin",
        sinks: list[Any] | None = None,
    ) -> None:
        """Initialize marketplace scenario.

        Parameters
        ----------
        num_properties : int
            Number of properties to tokenize.
        num_investors : int
            Number of investors trading.
        num_operations : int
            Number of purchase/transfer/deactivation attempts.
        deactivation_rate : float
            Probability that an operation deactivates a property (0.0 to 1.0).
        seed : int | None
            Random seed for reproducibility.
        administrator : str
            Registry administrator identity.
        sinks : list[Any] | None
            Event sinks attached to the ledger.
        """
        self.num_properties = num_properties
        self.num_investors = num_investors
        self.num_operations = num_operations
        self.deactivation_rate = deactivation_rate
        self.administrator = administrator
        self.rng = random.Random(seed)

        self.treasury = Treasury()
        self.ledger = FractionalLedger(administrator, gateway=self.treasury, sinks=sinks)
        self._property_gen = PropertyGenerator(seed=seed)
        self._investor_gen = InvestorGenerator(seed=seed)

        self.tendered: dict[str, int] = {}
        self.counts: dict[str, int] = {
            "purchases": 0,
            "transfers": 0,
            "deactivations": 0,
            "withdrawals": 0,
            "rejected": 0,
        }

    def generate(self) -> FractionalLedger:
        """Run the scenario.

        Returns
        -------
        FractionalLedger
            Ledger holding the resulting state and event log.
        """
        logger.info(
            "Starting marketplace scenario: %d properties, %d investors, %d operations",
            self.num_properties,
            self.num_investors,
            self.num_operations,
        )

        sellers = self._investor_gen.generate_many(self.num_properties)
        for seller in sellers:
            offering = self._property_gen.generate()
            self.ledger.tokenize_property(
                self.administrator,
                offering.address,
                offering.total_value,
                offering.total_shares,
                offering.metadata_uri,
                owner=seller.identity,
            )

        investors = [i.identity for i in self._investor_gen.generate_many(self.num_investors)]
        logger.info("Tokenized %d properties for %d investors", self.num_properties, len(investors))
        if not sellers or len(investors) < 2:
            logger.warning("Nothing to trade: need at least one property and two investors")
            return self.ledger

        for _ in range(self.num_operations):
            prop = self.ledger.get_property(self.rng.randint(1, self.ledger.get_current_id()))
            roll = self.rng.random()
            try:
                if roll < self.deactivation_rate:
                    self._deactivate_and_withdraw(prop)
                elif roll < 0.65:
                    self._purchase(prop, self.rng.choice(investors))
                else:
                    self._transfer(prop, investors)
            except LedgerError as e:
                self.counts["rejected"] += 1
                logger.debug("Rejected %s on property %d: %s", type(e).__name__, prop.property_id, e)

            self.ledger.check_invariants()

        logger.info("Marketplace scenario complete: %s", self.summary())
        return self.ledger

    def _purchase(self, prop: Property, buyer: str) -> None:
        shares = self.rng.randint(1, max(1, prop.total_shares // 10))
        cost = shares * prop.price_per_share
        # One purchase in four overpays
        tendered = cost + (self.rng.randint(1, prop.price_per_share + 1) if self.rng.random() < 0.25 else 0)

        self.ledger.purchase_shares(buyer, prop.property_id, shares, tendered)
        self.tendered[buyer] = self.tendered.get(buyer, 0) + tendered
        self.counts["purchases"] += 1

    def _transfer(self, prop: Property, investors: list[str]) -> None:
        holders = self.ledger.get_property_investors(prop.property_id)
        if not holders:
            return
        sender = self.rng.choice(holders)
        recipient = self.rng.choice([i for i in investors if i != sender])
        held = self.ledger.get_investor_shares(prop.property_id, sender)

        self.ledger.transfer_shares(sender, prop.property_id, recipient, self.rng.randint(1, held))
        self.counts["transfers"] += 1

    def _deactivate_and_withdraw(self, prop: Property) -> None:
        self.ledger.deactivate_property(self.administrator, prop.property_id)
        self.counts["deactivations"] += 1
        if self.ledger.get_property(prop.property_id).available_shares > 0:
            self.ledger.withdraw_unsold_shares(self.administrator, prop.property_id)
            self.counts["withdrawals"] += 1

    def export(self, sinks: list[Any]) -> None:
        """Replay the full event log into sinks.

        Parameters
        ----------
        sinks : list[Any]
            List of sink instances (KafkaSink, JsonFileSink, etc.).
        """
        for sink in sinks:
            self.ledger.events.replay(sink)

        logger.info("Exported %d events to %d sinks", len(self.ledger.events), len(sinks))

    def summary(self) -> dict[str, int]:
        """Operation counts plus ledger state counts and value moved."""
        return {
            **self.counts,
            **self.ledger.summary(),
            "value_tendered": sum(self.tendered.values()),
            "value_settled": sum(amount for _, amount in self.treasury.transfers),
        }
