"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from fractional_ledger.ledger import FractionalLedger
from fractional_ledger.settlement import Treasury


class TickingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def admin() -> str:
    """Registry administrator identity."""
    return "admin"


@pytest.fixture
def alice() -> str:
    return "0xalice"


@pytest.fixture
def bob() -> str:
    return "0xbob"


@pytest.fixture
def clock() -> TickingClock:
    """Clock starting at a fixed instant."""
    return TickingClock(datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def treasury() -> Treasury:
    """In-memory value-transfer primitive."""
    return Treasury()


@pytest.fixture
def ledger(admin: str, treasury: Treasury, clock: TickingClock) -> FractionalLedger:
    """Fresh ledger for each test."""
    return FractionalLedger(admin, gateway=treasury, clock=clock)


@pytest.fixture
def property_id(ledger: FractionalLedger, admin: str) -> int:
    """Property worth 1000 split into 10 shares of 100."""
    return ledger.tokenize_property(admin, "1 Main St, Springfield", 1000, 10, "ipfs://main-st")
