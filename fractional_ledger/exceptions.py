"""Custom exception hierarchy for fractional-ledger."""


class LedgerError(Exception):
    """Base exception for all fractional-ledger errors."""


class ValidationError(LedgerError):
    """Raised when an operation receives malformed input."""


class AuthorizationError(LedgerError):
    """Raised when a non-administrator calls a restricted operation."""


class StateError(LedgerError):
    """Raised when the ledger or a property is in the wrong state for the operation."""


class NotFoundError(LedgerError):
    """Raised when a referenced property does not exist."""


class PaymentError(LedgerError):
    """Raised when the tendered value does not cover the required cost."""


class SettlementError(LedgerError):
    """Raised when an outbound value transfer fails."""


class ReentrancyError(LedgerError):
    """Raised when a locked operation is entered again before it completes."""


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""


class SinkError(LedgerError):
    """Raised when a sink operation fails."""
