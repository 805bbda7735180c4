"""Tests for ReconciliationEngine."""

from copy import deepcopy
from datetime import date
from decimal import Decimal

import pytest

from txn_mirror.engine import ReconciliationEngine
from txn_mirror.exceptions import UnresolvedReferenceError
from txn_mirror.models import RemovedTransaction, SyncDelta


@pytest.fixture
def engine() -> ReconciliationEngine:
    return ReconciliationEngine()


def ids(records) -> list[str]:
    return [r.id for r in records]


class TestRemovals:
    """Tests for the removal step."""

    def test_remove_by_id(self, engine, make_record) -> None:
        records = [make_record("A"), make_record("B")]

        result = engine.apply(records, SyncDelta(removed=[RemovedTransaction("A")]))

        assert ids(result.records) == ["B"]

    def test_remove_by_pending_id(self, engine, make_record) -> None:
        records = [make_record("Q", pending_id="P"), make_record("B")]

        result = engine.apply(records, SyncDelta(removed=[RemovedTransaction("P")]))

        assert ids(result.records) == ["B"]

    def test_unknown_removal_is_noop(self, engine, make_record) -> None:
        records = [make_record("A"), make_record("B")]

        result = engine.apply(records, SyncDelta(removed=[RemovedTransaction("Z"), RemovedTransaction("A")]))

        assert len(result.records) == len(records) - 1
        assert result.counts.removed == 2

    def test_input_not_mutated(self, engine, make_record, make_txn) -> None:
        records = [make_record("A", notes="keep"), make_record("B")]
        snapshot = deepcopy(records)

        engine.apply(
            records,
            SyncDelta(
                added=[make_txn("C")],
                modified=[make_txn("A", amount=Decimal("1"))],
                removed=[RemovedTransaction("B")],
            ),
        )

        assert records == snapshot


class TestModifications:
    """Tests for the modification step."""

    def test_modify_overwrites_upstream_fields(self, engine, make_record, make_txn) -> None:
        records = [make_record("A", amount=Decimal("-5"), pending=True)]

        result = engine.apply(records, SyncDelta(modified=[make_txn("A", amount=Decimal("7.25"))]))

        (record,) = result.records
        assert record.amount == Decimal("-7.25")
        assert record.pending is False

    def test_modify_never_overwrites_user_fields(self, engine, make_record, make_txn) -> None:
        records = [make_record("A", category="Groceries", subcategory="Weekly", notes="costco run", internal=True)]
        txn = make_txn("A", category=["Travel", "Airlines and Aviation Services"])

        result = engine.apply(records, SyncDelta(modified=[txn]))

        (record,) = result.records
        assert record.category == "Groceries"
        assert record.subcategory == "Weekly"
        assert record.notes == "costco run"
        assert record.internal is True

    def test_unmatched_modification_dropped(self, engine, make_record, make_txn) -> None:
        records = [make_record("A")]

        result = engine.apply(records, SyncDelta(modified=[make_txn("ghost")]))

        assert ids(result.records) == ["A"]
        assert len(result.unresolved) == 1
        assert isinstance(result.unresolved[0], UnresolvedReferenceError)
        assert result.unresolved[0].transaction_id == "ghost"
        assert result.counts.modified == 1

    def test_modification_does_not_promote(self, engine, make_record, make_txn) -> None:
        records = [make_record("P", pending=True)]

        result = engine.apply(records, SyncDelta(modified=[make_txn("Q", pending_transaction_id="P")]))

        assert ids(result.records) == ["P"]
        assert result.unresolved[0].transaction_id == "Q"

    def test_modified_date_reorders(self, engine, make_record, make_txn) -> None:
        records = [make_record("A", date(2024, 1, 3)), make_record("B", date(2024, 1, 1))]

        result = engine.apply(records, SyncDelta(modified=[make_txn("B", date(2024, 1, 5))]))

        assert ids(result.records) == ["B", "A"]


class TestAdditions:
    """Tests for the addition step."""

    def test_insert_between_dates(self, engine, make_record, make_txn) -> None:
        records = [make_record("1", date(2024, 1, 3)), make_record("2", date(2024, 1, 1))]

        result = engine.apply(records, SyncDelta(added=[make_txn("new", date(2024, 1, 2))]))

        assert ids(result.records) == ["1", "new", "2"]

    def test_insert_ahead_of_equal_dates(self, engine, make_record, make_txn) -> None:
        records = [make_record("1", date(2024, 1, 2)), make_record("2", date(2024, 1, 2))]

        result = engine.apply(records, SyncDelta(added=[make_txn("new", date(2024, 1, 2))]))

        assert ids(result.records) == ["new", "1", "2"]

    def test_later_insertions_first_among_ties(self, engine, make_txn) -> None:
        delta = SyncDelta(added=[make_txn("a", date(2024, 1, 2)), make_txn("b", date(2024, 1, 2))])

        result = engine.apply([], delta)

        assert ids(result.records) == ["b", "a"]

    def test_append_when_oldest(self, engine, make_record, make_txn) -> None:
        records = [make_record("1", date(2024, 1, 3))]

        result = engine.apply(records, SyncDelta(added=[make_txn("old", date(2023, 12, 1))]))

        assert ids(result.records) == ["1", "old"]

    def test_unsorted_store_is_reordered(self, engine, make_record) -> None:
        records = [make_record("old", date(2024, 1, 1)), make_record("new", date(2024, 2, 1))]

        result = engine.apply(records, SyncDelta())

        assert ids(result.records) == ["new", "old"]

    def test_added_defaults(self, engine, make_txn, checking_account) -> None:
        result = engine.apply([], SyncDelta(added=[make_txn("t1")], accounts=[checking_account]))

        (record,) = result.records
        assert record.account_ref == "Everyday Checking"
        assert record.internal is False
        assert record.notes == ""

    def test_added_existing_id_updates_in_place(self, engine, make_record, make_txn) -> None:
        records = [make_record("A", notes="mine")]

        result = engine.apply(records, SyncDelta(added=[make_txn("A", amount=Decimal("3"))]))

        (record,) = result.records
        assert record.amount == Decimal("-3")
        assert record.notes == "mine"

    def test_malformed_amount_skipped(self, engine, make_record, make_txn) -> None:
        records = [make_record("A")]

        result = engine.apply(records, SyncDelta(added=[make_txn("bad", amount=Decimal("NaN")), make_txn("good")]))

        assert set(ids(result.records)) == {"A", "good"}
        assert [s.payload.transaction_id for s in result.skipped] == ["bad"]


class TestPromotion:
    """Tests for pending to posted promotion."""

    def test_pending_promoted_in_place(self, engine, make_record, make_txn) -> None:
        pending = make_record(
            "P",
            pending=True,
            category="Dining",
            subcategory="Lunch",
            notes="team lunch",
            internal=True,
        )

        result = engine.apply(
            [pending],
            SyncDelta(added=[make_txn("Q", pending_transaction_id="P", category=["Shops"])]),
        )

        (record,) = result.records
        assert record.id == "Q"
        assert record.pending is False
        assert record.pending_id == "P"
        assert record.category == "Dining"
        assert record.subcategory == "Lunch"
        assert record.notes == "team lunch"
        assert record.internal is True

    def test_promotion_with_removal_in_same_delta(self, engine, make_record, make_txn) -> None:
        """Upstream removes the pending id and adds the posted one together."""
        pending = make_record("P", pending=True, notes="keep me")

        result = engine.apply(
            [pending],
            SyncDelta(
                added=[make_txn("Q", pending_transaction_id="P")],
                removed=[RemovedTransaction("P")],
            ),
        )

        (record,) = result.records
        assert record.id == "Q"
        assert record.notes == "keep me"

    def test_removal_stands_when_posted_entry_is_skipped(self, engine, make_record, make_txn) -> None:
        """A held-back removal still applies if the promoting entry is malformed."""
        pending = make_record("P", pending=True)

        result = engine.apply(
            [pending, make_record("B")],
            SyncDelta(
                added=[make_txn("Q", pending_transaction_id="P", amount=Decimal("NaN"))],
                removed=[RemovedTransaction("P")],
            ),
        )

        assert ids(result.records) == ["B"]
        assert [s.payload.transaction_id for s in result.skipped] == ["Q"]

    def test_held_back_removal_without_stored_pending(self, engine, make_record, make_txn) -> None:
        """The posted record inserted for an unknown pending id is kept."""
        result = engine.apply(
            [make_record("B")],
            SyncDelta(
                added=[make_txn("Q", pending_transaction_id="P")],
                removed=[RemovedTransaction("P")],
            ),
        )

        assert sorted(ids(result.records)) == ["B", "Q"]

    def test_promotion_keeps_position(self, engine, make_record, make_txn) -> None:
        records = [
            make_record("A", date(2024, 1, 2)),
            make_record("P", date(2024, 1, 2), pending=True),
            make_record("B", date(2024, 1, 1)),
        ]

        result = engine.apply(records, SyncDelta(added=[make_txn("Q", date(2024, 1, 2), pending_transaction_id="P")]))

        assert ids(result.records) == ["A", "Q", "B"]

    def test_pending_added_and_posted_in_one_delta(self, engine, make_txn) -> None:
        delta = SyncDelta(
            added=[
                make_txn("P", pending=True),
                make_txn("Q", pending_transaction_id="P"),
            ]
        )

        result = engine.apply([], delta)

        assert ids(result.records) == ["Q"]

    def test_promotion_evicts_stale_posted_copy(self, engine, make_record, make_txn) -> None:
        records = [make_record("P", pending=True), make_record("Q")]

        result = engine.apply(records, SyncDelta(added=[make_txn("Q", pending_transaction_id="P")]))

        assert ids(result.records) == ["Q"]
        assert result.records[0].pending_id == "P"


class TestIdempotence:
    """Re-applying a delta yields the same record set."""

    def _delta(self, make_txn) -> SyncDelta:
        return SyncDelta(
            added=[
                make_txn("Q", date(2024, 1, 4), pending_transaction_id="P"),
                make_txn("N", date(2024, 1, 2)),
            ],
            modified=[make_txn("A", date(2024, 1, 3), amount=Decimal("42"))],
            removed=[RemovedTransaction("P"), RemovedTransaction("B")],
        )

    def _store(self, make_record) -> list:
        return [
            make_record("P", date(2024, 1, 4), pending=True, notes="n"),
            make_record("A", date(2024, 1, 3)),
            make_record("B", date(2024, 1, 1)),
        ]

    def test_same_pre_state_same_result(self, engine, make_record, make_txn) -> None:
        first = engine.apply(self._store(make_record), self._delta(make_txn))
        second = engine.apply(self._store(make_record), self._delta(make_txn))

        assert first.records == second.records

    def test_replay_on_post_state(self, engine, make_record, make_txn) -> None:
        """A delta replayed after its cursor failed to persist changes nothing."""
        first = engine.apply(self._store(make_record), self._delta(make_txn))
        replay = engine.apply(first.records, self._delta(make_txn))

        assert sorted(ids(replay.records)) == sorted(ids(first.records))
        assert {r.id: r for r in replay.records} == {r.id: r for r in first.records}

    def test_counts_from_delta_sizes(self, engine, make_record, make_txn) -> None:
        result = engine.apply(self._store(make_record), self._delta(make_txn))

        assert result.counts.to_dict() == {"added": 2, "modified": 1, "removed": 2}
