"""
Unit tests for the in-memory series store.

Run with: pytest tests/test_storage_unit.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from series_store.storage.interfaces import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
)
from series_store.storage.memory import InMemorySeriesStore, to_local_naive
from series_store.types import LAST_MODIFIED, SERIES_NOT_FOUND, SeriesRecord
from tests.fixtures import (
    FrozenClock,
    StepClock,
    create_sample_ledger,
    create_sample_series,
    create_sample_store,
    iter_names,
)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def store():
    """Create a populated store with a deterministic clock."""
    return create_sample_store()


# ============================================================================
# Seeding
# ============================================================================


def test_seed_stamps_missing_last_modified(store):
    """Test that seeded series without a stamp get one."""
    assert store.get("gamma").last_modified is not None
    assert store.get("alpha").last_modified == datetime(2019, 1, 1)


def test_seed_rejects_duplicate_names():
    """Test that two seed series may not share a name."""
    with pytest.raises(ValueError):
        InMemorySeriesStore(series=[create_sample_series("x"), create_sample_series("X")])


def test_seed_rejects_unnamed_series():
    """Test that every seed series needs a PrimName."""
    with pytest.raises(ValueError):
        InMemorySeriesStore(series=[SeriesRecord(values=(1.0,))])
    with pytest.raises(ValueError):
        InMemorySeriesStore(series=[create_sample_series(" ")])


def test_seed_rejects_name_shared_with_ledger():
    """Test that an editable series cannot shadow a revision series."""
    with pytest.raises(ValueError):
        InMemorySeriesStore(
            series=[create_sample_series("withrev")],
            ledgers={"withrev": create_sample_ledger()},
        )


# ============================================================================
# Lookup
# ============================================================================


def test_get_is_case_insensitive(store):
    """Test that names match regardless of case."""
    assert store.get("ALPHA").name == "alpha"


def test_get_unknown_returns_none(store):
    """Test that an unknown name is absent, not an error."""
    assert store.get("nothing") is None


def test_get_revision_series_returns_current(store):
    """Test that revision-tracked series resolve to their latest vintage."""
    record = store.get("WithRev")

    assert record.values == (10.0, 20.0, 30.0)
    assert record.metadata["StoresRevisionHistory"] == "1"


def test_get_many_reports_missing_inline(store):
    """Test that batch loads keep request order and flag missing names."""
    results = store.get_many(["beta", "missing", "withrev"])

    assert [r.ok for r in results] == [True, False, True]
    assert results[0].data.name == "beta"
    assert results[1].error == SERIES_NOT_FOUND


def test_get_many_meta_returns_entities(store):
    """Test the metadata-only batch load."""
    results = store.get_many_meta(["alpha", "missing"])

    assert results[0].data.metadata["Description"] == "Alpha arrivals"
    assert results[1].error == SERIES_NOT_FOUND


def test_returned_metadata_is_a_copy(store):
    """Test that callers cannot change stored metadata."""
    store.get("alpha").metadata["Description"] = "changed"
    assert store.get("alpha").metadata["Description"] == "Alpha arrivals"


# ============================================================================
# Create and replace
# ============================================================================


def test_create_new_series_stamps_and_lists(store):
    """Test creation of a new series."""
    stamp = store.create_or_replace(create_sample_series("delta", "Delta"))

    record = store.get("delta")
    assert record.last_modified == stamp
    assert record.metadata[LAST_MODIFIED] == stamp
    assert store.count() == 4

    other = store.list_series("Other")
    row = other.groups[0].rows[-1]
    assert row.names == ("delta",)
    assert row.description == "delta"
    assert row.indentation == 0
    assert row.emphasized is False
    assert row.space_above is False


def test_create_ignores_incoming_last_modified(store):
    """Test that the store sets the stamp, not the caller."""
    supplied = datetime(1999, 1, 1)
    stamp = store.create_or_replace(create_sample_series("delta", last_modified=supplied))
    assert stamp != supplied
    assert store.get("delta").last_modified == stamp


def test_create_existing_without_token_conflicts(store):
    """Test that an existing name needs a token or force."""
    with pytest.raises(ConflictError, match="Series with that name already exists"):
        store.create_or_replace(create_sample_series("alpha"))


def test_optimistic_concurrency_round_trip(store):
    """Test replace with the current token, then refusal of a stale one."""
    t0 = store.create_or_replace(create_sample_series("delta", values=[1.0]))
    t1 = store.create_or_replace(create_sample_series("delta", values=[2.0]), expected_last_modified=t0)

    assert t1 > t0
    assert store.get("delta").values == (2.0,)

    with pytest.raises(ConflictError, match="LastModified does not match"):
        store.create_or_replace(create_sample_series("delta", values=[3.0]), expected_last_modified=t0)
    assert store.get("delta").values == (2.0,)


def test_force_replace_always_wins(store):
    """Test that force replaces regardless of token."""
    stale = datetime(2000, 1, 1)
    store.create_or_replace(create_sample_series("alpha", values=[9.0]), expected_last_modified=stale, force_replace=True)
    assert store.get("alpha").values == (9.0,)


def test_replace_does_not_add_listing_row(store):
    """Test that only creation registers the series in the catch-all listing."""
    t0 = store.create_or_replace(create_sample_series("delta"))
    store.create_or_replace(create_sample_series("delta"), expected_last_modified=t0)

    assert list(iter_names(store.list_series("Other"))) == ["delta"]


def test_create_for_missing_name_with_token_inserts(store):
    """Test that a token for a series that does not exist just creates it."""
    store.create_or_replace(create_sample_series("delta"), expected_last_modified=datetime(2000, 1, 1))
    assert store.get("delta") is not None


def test_create_revision_series_is_refused(store):
    """Test that revision-tracked series are read-only."""
    with pytest.raises(InvalidOperationError):
        store.create_or_replace(create_sample_series("withrev"), force_replace=True)


def test_create_without_name_is_refused(store):
    """Test that a candidate needs a PrimName."""
    with pytest.raises(InvalidOperationError):
        store.create_or_replace(SeriesRecord(values=(1.0,)))


@pytest.mark.parametrize("name", ["", "   "])
def test_create_with_blank_name_is_refused(store, name):
    """Test that blank names are treated as missing."""
    with pytest.raises(InvalidOperationError):
        store.create_or_replace(create_sample_series(name))
    assert store.count() == 3
    assert list(iter_names(store.list_series("Other"))) == []


def test_stamps_strictly_increase_with_frozen_clock():
    """Test that two saves in the same instant still get distinct stamps."""
    store = InMemorySeriesStore(clock=FrozenClock())

    t0 = store.create_or_replace(create_sample_series("a"))
    t1 = store.create_or_replace(create_sample_series("b"))
    t2 = store.create_or_replace(create_sample_series("a"), expected_last_modified=t0)

    assert t0 < t1 < t2


def test_offset_token_is_compared_in_local_time(store):
    """Test that an offset-bearing token matches the equivalent local stamp."""
    t0 = store.create_or_replace(create_sample_series("delta"))
    aware = t0.astimezone(timezone.utc)

    store.create_or_replace(create_sample_series("delta", values=[5.0]), expected_last_modified=aware)
    assert store.get("delta").values == (5.0,)


def test_to_local_naive_passes_naive_through():
    """Test that naive stamps are not shifted."""
    stamp = datetime(2024, 1, 1, 12)
    assert to_local_naive(stamp) == stamp
    assert to_local_naive(stamp.astimezone(timezone.utc)) == stamp


# ============================================================================
# Delete
# ============================================================================


def test_delete_removes_series_and_listing_rows(store):
    """Test delete pruning across listings and groups."""
    assert store.delete("GAMMA") is True
    assert store.get("gamma") is None

    mixed = store.list_series("Mixed")
    first, second = mixed.groups
    assert [row.names for row in first.rows] == [("alpha", "beta")]
    assert second.rows == ()


def test_delete_keeps_rows_with_other_names(store):
    """Test that a shared row keeps its remaining names."""
    store.delete("alpha")

    mixed = store.list_series("Mixed")
    assert mixed.groups[0].rows[0].names == ("beta",)


def test_delete_unknown_returns_false(store):
    """Test that deleting an unknown name reports absence."""
    assert store.delete("nothing") is False


def test_delete_revision_series_returns_false(store):
    """Test that revision-tracked series cannot be deleted and stay listed."""
    assert store.delete("withrev") is False
    assert "withrev" in list(iter_names(store.list_series("Revisions")))


def test_delete_then_create_registers_again(store):
    """Test that a re-created series is listed once in the catch-all listing."""
    store.create_or_replace(create_sample_series("delta"))
    store.delete("delta")
    store.create_or_replace(create_sample_series("delta"))

    assert list(iter_names(store.list_series("Other"))) == ["delta"]


# ============================================================================
# Revisions
# ============================================================================


def test_revision_operations_on_editable_series_are_not_found(store):
    """Test that ledger operations need a revision-tracked series."""
    with pytest.raises(NotFoundError):
        store.load_vintage("alpha", datetime(2020, 1, 1))
    with pytest.raises(NotFoundError):
        store.list_vintages("alpha")
    with pytest.raises(NotFoundError):
        store.load_release("alpha", 0)
    with pytest.raises(NotFoundError):
        store.load_complete_history("nothing")


def test_revision_operations_are_case_insensitive(store):
    """Test ledger lookup by any spelling of the name."""
    assert len(store.list_vintages("WITHREV")) == 3
    record = store.load_vintage("withrev", datetime(2018, 6, 1, tzinfo=timezone.utc))
    assert record.values == (10.0, 20.0)


def test_load_release_negative_is_invalid(store):
    """Test that a negative release number is refused."""
    with pytest.raises(InvalidOperationError):
        store.load_release("withrev", -1)


def test_load_complete_history(store):
    """Test complete history through the store."""
    history = store.load_complete_history("withrev")
    assert len(history) == 3


# ============================================================================
# Search
# ============================================================================


def test_search_is_case_insensitive_substring(store):
    """Test search containment."""
    results = store.search("ARRIVALS")
    assert sorted(meta["PrimName"] for meta in results) == ["alpha", "gamma"]


def test_search_covers_revision_series(store):
    """Test that revision-tracked series are searchable."""
    results = store.search("with revisions")
    assert [meta["PrimName"] for meta in results] == ["withrev"]


def test_search_without_matches_is_not_found(store):
    """Test that an empty result is reported as absence."""
    with pytest.raises(NotFoundError):
        store.search("zzz")


def test_search_sees_new_series(store):
    """Test that created series are searchable immediately."""
    store.create_or_replace(create_sample_series("delta", "Fresh arrivals"))
    names = [meta["PrimName"] for meta in store.search("fresh")]
    assert names == ["delta"]


def test_count_and_revision_count(store):
    """Test store size accessors."""
    assert store.count() == 3
    assert store.revision_count() == 1


def test_step_clock_stamps_follow_clock():
    """Test that stamps come from the injected clock when it advances."""
    clock = StepClock(datetime(2030, 1, 1))
    store = InMemorySeriesStore(clock=clock)
    stamp = store.create_or_replace(create_sample_series("a"))
    assert stamp == datetime(2030, 1, 1) + timedelta(seconds=1)
