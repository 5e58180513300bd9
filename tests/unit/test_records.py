"""
Unit tests for name records, the lifecycle evaluator and the indices.
"""

import logging

import pytest

from src.domain.ports import NameState
from src.domain.records import (
    NameRecord,
    NameStore,
    OwnerIndex,
    PrimaryNames,
    evaluate_lifecycle,
)


def make_record(name_id: int = 1, label: str = "alice", owner: str = "wallet_1") -> NameRecord:
    return NameRecord(
        name_id=name_id,
        label=label,
        full_name=f"{label}.sBTC",
        owner=owner,
        resolver=None,
        expires_at=100,
        is_premium=False,
        created_at=0,
        last_renewed_at=0,
    )


class TestEvaluateLifecycle:
    """Tests for ACTIVE / GRACE / FULLY_EXPIRED boundaries (expiry 100, grace 10)."""

    @pytest.mark.parametrize(
        ("now", "expected"),
        [
            (0, NameState.ACTIVE),
            (100, NameState.ACTIVE),
            (101, NameState.GRACE),
            (110, NameState.GRACE),
            (111, NameState.FULLY_EXPIRED),
            (10_000, NameState.FULLY_EXPIRED),
        ],
    )
    def test_boundaries(self, now: int, expected: NameState) -> None:
        assert evaluate_lifecycle(now, expires_at=100, grace_period=10) is expected

    def test_zero_grace_period(self) -> None:
        assert evaluate_lifecycle(101, expires_at=100, grace_period=0) is NameState.FULLY_EXPIRED


class TestNameStore:
    """Tests for the label store and reverse index."""

    def test_ids_start_at_one_and_increase(self) -> None:
        store = NameStore()
        assert store.last_id == 0
        assert store.next_id() == 1
        assert store.next_id() == 2
        assert store.last_id == 2

    def test_put_indexes_reverse_lookup(self) -> None:
        store = NameStore()
        store.put(make_record(name_id=7))
        assert store.get("alice").name_id == 7
        assert store.label_for(7) == "alice"

    def test_overwrite_keeps_stale_reverse_entry(self) -> None:
        store = NameStore()
        store.put(make_record(name_id=1, owner="wallet_1"))
        store.put(make_record(name_id=2, owner="wallet_2"))

        assert store.get("alice").owner == "wallet_2"
        assert store.label_for(1) == "alice"
        assert store.label_for(2) == "alice"

    def test_update_replaces_fields(self) -> None:
        store = NameStore()
        store.put(make_record())
        updated = store.update("alice", owner="wallet_2", resolver="resolver-1")
        assert updated.owner == "wallet_2"
        assert store.get("alice").resolver == "resolver-1"

    def test_missing_label(self) -> None:
        assert NameStore().get("nobody") is None
        assert NameStore().label_for(1) is None


class TestOwnerIndex:
    """Tests for the bounded per-account id index."""

    def test_add_and_list_in_order(self) -> None:
        index = OwnerIndex(capacity=10)
        index.add("wallet_1", 3)
        index.add("wallet_1", 1)
        assert index.names_of("wallet_1") == [3, 1]

    def test_duplicate_not_added_twice(self) -> None:
        index = OwnerIndex(capacity=10)
        assert index.add("wallet_1", 1) is True
        assert index.add("wallet_1", 1) is False
        assert index.names_of("wallet_1") == [1]

    def test_remove(self) -> None:
        index = OwnerIndex(capacity=10)
        index.add("wallet_1", 1)
        index.add("wallet_1", 2)
        index.remove("wallet_1", 1)
        assert index.names_of("wallet_1") == [2]

    def test_remove_unknown_is_noop(self) -> None:
        index = OwnerIndex(capacity=10)
        index.remove("wallet_1", 42)
        assert index.names_of("wallet_1") == []

    def test_move(self) -> None:
        index = OwnerIndex(capacity=10)
        index.add("wallet_1", 1)
        index.move(1, "wallet_1", "wallet_2")
        assert index.names_of("wallet_1") == []
        assert index.names_of("wallet_2") == [1]

    def test_overflow_is_silently_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Insertion beyond capacity is dropped with a warning, not an error."""
        index = OwnerIndex(capacity=2)
        index.add("wallet_1", 1)
        index.add("wallet_1", 2)

        with caplog.at_level(logging.WARNING):
            assert index.add("wallet_1", 3) is False

        assert index.names_of("wallet_1") == [1, 2]
        assert "Owner index full" in caplog.text

    def test_names_of_returns_copy(self) -> None:
        index = OwnerIndex(capacity=10)
        index.add("wallet_1", 1)
        index.names_of("wallet_1").append(99)
        assert index.names_of("wallet_1") == [1]


class TestPrimaryNames:
    """Tests for primary-name bookkeeping."""

    def test_assign_if_missing(self) -> None:
        primary = PrimaryNames()
        assert primary.assign_if_missing("wallet_1", "alice") is True
        assert primary.assign_if_missing("wallet_1", "bob") is False
        assert primary.get("wallet_1") == "alice"

    def test_clear_if_points_at(self) -> None:
        primary = PrimaryNames()
        primary.set("wallet_1", "alice")
        assert primary.clear_if_points_at("wallet_1", "bob") is False
        assert primary.clear_if_points_at("wallet_1", "alice") is True
        assert primary.get("wallet_1") is None

    def test_clear_returns_previous(self) -> None:
        primary = PrimaryNames()
        primary.set("wallet_1", "alice")
        assert primary.clear("wallet_1") == "alice"
        assert primary.clear("wallet_1") is None
