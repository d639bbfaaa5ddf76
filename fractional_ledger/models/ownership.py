"""Share ownership model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ShareOwnership:
    """Holding of one investor in one property."""

    property_id: int
    investor: str
    shares: int = 0
    purchase_price: int = 0  # Cumulative amount paid or booked on transfer-in
    purchase_date: datetime | None = None  # First acquisition of the current holding

    @classmethod
    def empty(cls, property_id: int, investor: str) -> "ShareOwnership":
        """Zero-valued record for an investor without history."""
        return cls(property_id=property_id, investor=investor)
