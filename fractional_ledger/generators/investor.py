"""Investor identity generator."""

from dataclasses import dataclass

from fractional_ledger.generators.base import BaseGenerator


@dataclass(frozen=True)
class Investor:
    """A simulated investor."""

    identity: str  # Wallet-style address used as caller identity
    name: str
    email: str


class InvestorGenerator(BaseGenerator):
    """Generate synthetic investors with unique identities."""

    def generate(self) -> Investor:
        """Generate an investor.

        Returns
        -------
        Investor
            Generated investor.
        """
        return Investor(
            identity="0x" + self.fake.sha1(raw_output=False)[:40],
            name=self.fake.name(),
            email=self.fake.email(),
        )

    def generate_many(self, count: int) -> list[Investor]:
        """Generate ``count`` investors with distinct identities."""
        investors: dict[str, Investor] = {}
        while len(investors) < count:
            for investor in self.generate_batch(count - len(investors)):
                investors.setdefault(investor.identity, investor)
        return list(investors.values())
