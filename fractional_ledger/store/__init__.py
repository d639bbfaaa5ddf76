"""In-memory ledger state store."""

from fractional_ledger.store.ledger import LedgerStore

__all__ = ["LedgerStore"]
