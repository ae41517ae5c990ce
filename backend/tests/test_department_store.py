"""Compare-and-swap store tests against a real SQLite file."""
import threading
from datetime import date
from decimal import Decimal

import pytest

from registrar.domain.common.result import Deleted, Gone, NotFound, Stale, Updated
from registrar.persistence.repositories.sqlite.sqlite_department_store import SqliteDepartmentStore


# ------------------------------------------------------------------
# Create / read
# ------------------------------------------------------------------
def test_create_starts_at_version_one(economics):
    assert economics.version == 1
    assert economics.budget == Decimal("350000.00")
    assert economics.start_date == date(2007, 9, 1)
    assert economics.instructor_id is None


def test_ids_are_never_reused(store, economics):
    assert isinstance(store.delete(economics.department_id, 1), Deleted)
    again = store.create({"name": "Economics", "budget": 1, "start_date": date(2007, 9, 1)})
    assert again.department_id > economics.department_id


def test_read_is_idempotent(store, economics):
    first = store.read(economics.department_id)
    second = store.read(economics.department_id)
    assert first == second
    assert first.version == second.version == 1


def test_read_missing_returns_none(store):
    assert store.read(404) is None


# ------------------------------------------------------------------
# Update
# ------------------------------------------------------------------
def test_update_bumps_version_by_exactly_one(store, economics):
    result = store.update(economics.department_id, {"budget": Decimal("400000")}, 1)
    assert isinstance(result, Updated)
    assert result.record.version == 2
    assert result.record.budget == Decimal("400000.00")
    assert result.record.name == "Economics"

    result = store.update(economics.department_id, {"name": "Econ"}, 2)
    assert result.record.version == 3
    assert store.read(economics.department_id).version == 3


def test_failed_update_leaves_version_and_values_untouched(store, economics):
    store.update(economics.department_id, {"budget": 400000}, 1)
    before = store.read(economics.department_id)

    result = store.update(economics.department_id, {"budget": 1}, 1)

    assert isinstance(result, Stale)
    assert store.read(economics.department_id) == before


def test_stale_update_reports_diff_against_latest(store, economics):
    store.update(economics.department_id, {"name": "Y", "budget": 500}, 1)

    result = store.update(economics.department_id, {"name": "X"}, 1)

    assert isinstance(result, Stale)
    report = result.report
    assert report.current_version == 2
    assert [(c.field, c.attempted, c.current) for c in report.conflicts] == [("name", "X", "Y")]
    assert report.current_values["budget"] == Decimal("500.00")


def test_stale_retry_with_reported_version_succeeds(store, economics):
    store.update(economics.department_id, {"budget": 1}, 1)
    stale = store.update(economics.department_id, {"budget": 2}, 1)

    retried = store.update(economics.department_id, {"budget": 2}, stale.report.current_version)

    assert isinstance(retried, Updated)
    assert retried.record.version == 3
    assert retried.record.budget == Decimal("2.00")


def test_future_version_is_stale_not_applied(store, economics):
    result = store.update(economics.department_id, {"budget": 9}, 5)
    assert isinstance(result, Stale)
    assert result.report.current_version == 1


def test_empty_patch_still_confirms_a_new_version(store, economics):
    result = store.update(economics.department_id, {}, 1)
    assert isinstance(result, Updated)
    assert result.record.version == 2


def test_update_of_concurrently_deleted_record_is_gone(store, economics):
    store.delete(economics.department_id, 1)

    result = store.update(economics.department_id, {"name": "Econ"}, 1)

    assert isinstance(result, Gone)
    assert result.record_id == economics.department_id


def test_update_of_never_existing_record_is_not_found(store, economics):
    assert isinstance(store.update(9999, {"name": "Econ"}, 1), NotFound)


def test_update_on_empty_table_is_not_found(store):
    assert isinstance(store.update(1, {"name": "Econ"}, 1), NotFound)


@pytest.mark.parametrize("bad_version", [0, -1, "1", None, True])
def test_update_rejects_non_positive_versions(store, economics, bad_version):
    with pytest.raises(ValueError):
        store.update(economics.department_id, {"name": "Econ"}, bad_version)


def test_update_rejects_identity_and_version_in_patch(store, economics):
    with pytest.raises(ValueError):
        store.update(economics.department_id, {"version": 7}, 1)
    with pytest.raises(ValueError):
        store.update(economics.department_id, {"department_id": 7}, 1)
    assert store.read(economics.department_id).version == 1


# ------------------------------------------------------------------
# Concurrency
# ------------------------------------------------------------------
def test_concurrent_updates_admit_exactly_one_winner(db_path, economics):
    writers = 8
    barrier = threading.Barrier(writers)
    results = [None] * writers

    def write(i):
        store = SqliteDepartmentStore(db_path)
        barrier.wait()
        results[i] = store.update(economics.department_id, {"budget": Decimal(1000 + i)}, 1)

    threads = [threading.Thread(target=write, args=(i,)) for i in range(writers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [r for r in results if isinstance(r, Updated)]
    losers = [r for r in results if isinstance(r, Stale)]
    assert len(winners) == 1
    assert len(losers) == writers - 1
    for loser in losers:
        assert loser.report.current_version >= 2

    stored = SqliteDepartmentStore(db_path).read(economics.department_id)
    assert stored.version == 2
    assert stored.budget == winners[0].record.budget


def test_two_writers_never_merge(store, economics):
    a = store.update(economics.department_id, {"budget": Decimal("400000")}, 1)
    b = store.update(economics.department_id, {"name": "Finance"}, 1)

    assert isinstance(a, Updated)
    assert isinstance(b, Stale)
    stored = store.read(economics.department_id)
    assert stored.name == "Economics"
    assert stored.budget == Decimal("400000.00")


# ------------------------------------------------------------------
# End-to-end scenario
# ------------------------------------------------------------------
def test_budget_scenario(store):
    d = store.create({"name": "Econ", "budget": 350000, "start_date": date(2007, 9, 1)})
    assert d.version == 1

    # Writer A
    a = store.update(d.department_id, {"budget": 400000}, 1)
    assert isinstance(a, Updated)
    assert a.record.version == 2
    assert a.record.budget == Decimal("400000.00")

    # Writer B also read version 1
    b = store.update(d.department_id, {"budget": 380000, "name": "Econ"}, 1)
    assert isinstance(b, Stale)
    assert b.report.current_version == 2
    assert [(c.field, c.attempted, c.current) for c in b.report.conflicts] == [
        ("budget", 380000, Decimal("400000.00"))
    ]

    # B retries on the reported version
    retry = store.update(d.department_id, {"budget": 380000, "name": "Econ"}, b.report.current_version)
    assert isinstance(retry, Updated)
    assert retry.record.version == 3
    assert retry.record.budget == Decimal("380000.00")
