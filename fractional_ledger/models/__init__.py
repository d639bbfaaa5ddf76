"""Domain models for the fractional-ownership ledger."""

from fractional_ledger.models.base import LedgerEvent
from fractional_ledger.models.enums import EventType
from fractional_ledger.models.ownership import ShareOwnership
from fractional_ledger.models.property import Property

__all__ = ["EventType", "LedgerEvent", "Property", "ShareOwnership"]
