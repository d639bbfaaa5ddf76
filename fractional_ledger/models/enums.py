"""Enumeration types for ledger entities."""

from enum import Enum


class EventType(str, Enum):
    PROPERTY_TOKENIZED = "PropertyTokenized"
    SHARES_PURCHASED = "SharesPurchased"
    SHARES_TRANSFERRED = "SharesTransferred"
    PROPERTY_DEACTIVATED = "PropertyDeactivated"
    SHARES_WITHDRAWN = "SharesWithdrawn"
    METADATA_UPDATED = "MetadataUpdated"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"
    ADMINISTRATION_TRANSFERRED = "AdministrationTransferred"
    REFUND_DEFERRED = "RefundDeferred"
    REFUND_CLAIMED = "RefundClaimed"
