"""Property offering generator."""

from dataclasses import dataclass

from fractional_ledger.generators.base import BaseGenerator


@dataclass(frozen=True)
class PropertyOffering:
    """Arguments for one ``tokenize_property`` call."""

    address: str
    total_value: int
    total_shares: int
    metadata_uri: str


class PropertyGenerator(BaseGenerator):
    """Generate synthetic properties to tokenize."""

    SHARE_COUNTS = [10, 50, 100, 250, 1000]

    def generate(self) -> PropertyOffering:
        """Generate a property offering.

        Valuations are whole currency units expressed in cents and are
        not always divisible by the share count, so some offerings carry
        a rounding loss.

        Returns
        -------
        PropertyOffering
            Generated offering.
        """
        total_value = self.rng.randint(150, 2000) * 100_000 + self.rng.randint(0, 99)
        slug = self.fake.uuid4()

        return PropertyOffering(
            address=self.fake.address().replace("\n", ", "),
            total_value=total_value,
            total_shares=self.rng.choice(self.SHARE_COUNTS),
            metadata_uri=f"ipfs://{slug}",
        )
