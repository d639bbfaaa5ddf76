"""Tests for LedgerStore."""

from datetime import datetime, timezone

import pytest

from fractional_ledger.exceptions import NotFoundError, StateError
from fractional_ledger.models import Property, ShareOwnership
from fractional_ledger.store import LedgerStore


def make_property(property_id: int = 1, total_shares: int = 10) -> Property:
    return Property(
        property_id=property_id,
        address=f"{property_id} Test St",
        total_value=total_shares * 100,
        total_shares=total_shares,
        available_shares=total_shares,
        price_per_share=100,
        metadata_uri="",
        is_active=True,
        owner="admin",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def store() -> LedgerStore:
    """Store holding one property."""
    store = LedgerStore()
    store.add_property(make_property(store.next_property_id()))
    return store


class TestProperties:
    """Tests for property storage."""

    def test_ids(self) -> None:
        store = LedgerStore()
        assert store.last_property_id == 0
        assert store.next_property_id() == 1
        assert store.next_property_id() == 2
        assert store.last_property_id == 2

    def test_add_and_require(self, store: LedgerStore) -> None:
        assert store.require_property(1).address == "1 Test St"
        assert store.get_roster(1) == []

    def test_duplicate_id(self, store: LedgerStore) -> None:
        with pytest.raises(StateError):
            store.add_property(make_property(1))

    def test_missing(self, store: LedgerStore) -> None:
        with pytest.raises(NotFoundError):
            store.require_property(2)

    def test_save_unknown(self, store: LedgerStore) -> None:
        with pytest.raises(NotFoundError):
            store.save_property(make_property(5))


class TestRosters:
    """Tests for roster maintenance."""

    def test_add(self, store: LedgerStore) -> None:
        store.add_to_roster(1, "a")
        store.add_to_roster(1, "b")

        assert store.get_roster(1) == ["a", "b"]
        assert store.in_roster(1, "a")

    def test_duplicate_add(self, store: LedgerStore) -> None:
        store.add_to_roster(1, "a")

        with pytest.raises(StateError):
            store.add_to_roster(1, "a")

    def test_swap_remove(self, store: LedgerStore) -> None:
        """Test removal moves the last entry into the freed slot."""
        for name in ("a", "b", "c", "d"):
            store.add_to_roster(1, name)

        store.remove_from_roster(1, "b")
        assert store.get_roster(1) == ["a", "d", "c"]

        store.remove_from_roster(1, "c")
        assert store.get_roster(1) == ["a", "d"]

        store.add_to_roster(1, "b")
        store.remove_from_roster(1, "a")
        assert store.get_roster(1) == ["b", "d"]
        assert not store.in_roster(1, "a")

    def test_remove_last(self, store: LedgerStore) -> None:
        store.add_to_roster(1, "a")
        store.remove_from_roster(1, "a")

        assert store.get_roster(1) == []

    def test_remove_absent(self, store: LedgerStore) -> None:
        with pytest.raises(StateError):
            store.remove_from_roster(1, "ghost")

    def test_unknown_property(self, store: LedgerStore) -> None:
        with pytest.raises(NotFoundError):
            store.add_to_roster(9, "a")

    def test_total_holdings(self, store: LedgerStore) -> None:
        store.save_ownership(ShareOwnership(1, "a", shares=3, purchase_price=300))
        store.save_ownership(ShareOwnership(1, "b", shares=2, purchase_price=200))
        store.add_to_roster(1, "a")
        store.add_to_roster(1, "b")

        assert store.total_holdings(1) == 5


class TestTransactions:
    """Tests for journaled rollback."""

    def test_rollback_restores_everything(self, store: LedgerStore) -> None:
        store.add_to_roster(1, "a")
        store.save_ownership(ShareOwnership(1, "a", shares=1))
        before_prop = store.require_property(1)

        with pytest.raises(RuntimeError):
            with store.transaction():
                new_id = store.next_property_id()
                store.add_property(make_property(new_id))
                store.save_property(make_property(1, total_shares=99))
                store.save_ownership(ShareOwnership(1, "a", shares=7))
                store.save_ownership(ShareOwnership(1, "b", shares=2))
                store.add_to_roster(1, "b")
                store.remove_from_roster(1, "a")
                store.credit_pending_refund("a", 10)
                raise RuntimeError("abort")

        assert store.last_property_id == 1
        assert 2 not in store.properties
        assert store.get_roster(2) == []
        assert store.require_property(1) == before_prop
        assert store.get_ownership(1, "a").shares == 1
        assert store.get_ownership(1, "b") is None
        assert store.get_roster(1) == ["a"]
        assert store.in_roster(1, "a")
        assert not store.in_roster(1, "b")
        assert store.get_pending_refund("a") == 0
        assert not store.in_transaction

    def test_commit_keeps_changes(self, store: LedgerStore) -> None:
        with store.transaction():
            store.add_to_roster(1, "a")
            assert store.in_transaction

        assert store.get_roster(1) == ["a"]
        assert not store.in_transaction

    def test_inner_failure_keeps_outer_changes(self, store: LedgerStore) -> None:
        with store.transaction():
            store.add_to_roster(1, "a")
            with pytest.raises(RuntimeError):
                with store.transaction():
                    store.add_to_roster(1, "b")
                    raise RuntimeError("inner")

        assert store.get_roster(1) == ["a"]

    def test_outer_failure_undoes_committed_inner(self, store: LedgerStore) -> None:
        """Test a successful inner level is still undone by its failing parent."""
        with pytest.raises(RuntimeError):
            with store.transaction():
                with store.transaction():
                    store.add_to_roster(1, "a")
                    store.credit_pending_refund("x", 5)
                raise RuntimeError("outer")

        assert store.get_roster(1) == []
        assert store.get_pending_refund("x") == 0

    def test_outer_restores_value_before_inner(self, store: LedgerStore) -> None:
        """Test the outermost prior value wins when both levels touch an entry."""
        store.credit_pending_refund("x", 1)

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.credit_pending_refund("x", 2)
                with store.transaction():
                    store.credit_pending_refund("x", 4)
                raise RuntimeError("outer")

        assert store.get_pending_refund("x") == 1

    def test_rollback_restores_access_state(self, store: LedgerStore) -> None:
        store.set_administrator("admin")

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.set_paused(True)
                with store.transaction():
                    store.set_administrator("0xbob")
                raise RuntimeError("outer")

        assert store.administrator == "admin"
        assert store.paused is False


class TestPendingRefunds:
    """Tests for deferred refund balances."""

    def test_credit_and_clear(self) -> None:
        store = LedgerStore()
        store.credit_pending_refund("a", 5)
        store.credit_pending_refund("a", 7)

        assert store.get_pending_refund("a") == 12

        store.clear_pending_refund("a")
        store.clear_pending_refund("a")
        assert store.get_pending_refund("a") == 0

    def test_investor_ownerships(self, store: LedgerStore) -> None:
        store.add_property(make_property(store.next_property_id()))
        store.save_ownership(ShareOwnership(1, "a", shares=1))
        store.save_ownership(ShareOwnership(2, "a", shares=0))
        store.save_ownership(ShareOwnership(2, "b", shares=3))

        assert [o.property_id for o in store.get_investor_ownerships("a")] == [1, 2]

    def test_summary(self, store: LedgerStore) -> None:
        store.save_ownership(ShareOwnership(1, "a", shares=1))
        store.add_to_roster(1, "a")

        assert store.summary() == {
            "properties": 1,
            "active_properties": 1,
            "ownerships": 1,
            "holders": 1,
        }
