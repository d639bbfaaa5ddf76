"""Fractional-ownership ledger for tokenized real-world properties."""

from fractional_ledger.exceptions import (
    AuthorizationError,
    LedgerError,
    NotFoundError,
    PaymentError,
    ReentrancyError,
    SettlementError,
    StateError,
    ValidationError,
)
from fractional_ledger.ledger import FractionalLedger
from fractional_ledger.models import EventType, LedgerEvent, Property, ShareOwnership
from fractional_ledger.settlement import Treasury, ValueTransfer

__all__ = [
    "AuthorizationError",
    "EventType",
    "FractionalLedger",
    "LedgerError",
    "LedgerEvent",
    "NotFoundError",
    "PaymentError",
    "Property",
    "ReentrancyError",
    "SettlementError",
    "ShareOwnership",
    "StateError",
    "Treasury",
    "ValidationError",
    "ValueTransfer",
]
