"""Property model for tokenized real-world assets."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Property:
    """A real-world asset divided into a fixed number of shares.

    Records are immutable; the registry stores a replacement on every
    change so the store can journal the previous version.

    - available_shares: unsold shares still on offer
    - withdrawn_shares: unsold shares closed out after deactivation
    - price_per_share: total_value // total_shares, truncated
    - owner: asset owner receiving sale proceeds
    """

    property_id: int
    address: str
    total_value: int  # Smallest currency unit
    total_shares: int
    available_shares: int
    price_per_share: int
    metadata_uri: str
    is_active: bool
    owner: str
    created_at: datetime
    withdrawn_shares: int = 0
    updated_at: datetime | None = None

    @property
    def sold_shares(self) -> int:
        """Shares issued to investors."""
        return self.total_shares - self.available_shares - self.withdrawn_shares
