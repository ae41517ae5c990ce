"""Conflict resolution session tests, driven through the application service."""
from dataclasses import replace
from decimal import Decimal

import pytest

from registrar.domain.common.result import Blocked, Gone, Invalid, Stale, Updated
from registrar.domain.department.models import Course
from registrar.domain.department.session import (
    ConflictResolutionSession,
    InvalidTransition,
    SessionState,
)


@pytest.fixture
def session(service, economics):
    return ConflictResolutionSession.open(service, economics.department_id)


def test_open_missing_record_raises(service):
    with pytest.raises(LookupError):
        ConflictResolutionSession.open(service, 12345)


def test_clean_submit_commits(session):
    session.edit(budget=400000)
    outcome = session.submit()

    assert isinstance(outcome, Updated)
    assert session.state is SessionState.COMMITTED
    assert session.record.version == 2
    assert session.expected_version == 2
    assert session.is_terminal


def test_edit_snapshot_is_replaced_not_mutated(session):
    before = session.snapshot
    after = session.edit(name="Econ")
    assert before.intended == {}
    assert after.intended == {"name": "Econ"}
    assert after.base_version == before.base_version == 1


def test_conflict_exposes_attempted_and_current(service, session, economics):
    service.update_record(economics.department_id, {"budget": 400000}, 1)

    session.edit(budget=380000, name="Economics")
    outcome = session.submit()

    assert isinstance(outcome, Stale)
    assert session.state is SessionState.CONFLICTED
    rows = {row.field: row for row in session.comparison()}
    assert rows["budget"].attempted == Decimal("380000.00")
    assert rows["budget"].current == Decimal("400000.00")
    assert rows["budget"].differs
    assert not rows["name"].differs
    assert session.current_values["budget"] == Decimal("400000.00")


def test_retry_uses_authoritative_version(service, session, economics):
    service.update_record(economics.department_id, {"budget": 400000}, 1)
    session.edit(budget=380000)
    session.submit()

    outcome = session.retry()

    assert isinstance(outcome, Updated)
    assert outcome.record.version == 3
    assert outcome.record.budget == Decimal("380000.00")
    assert session.state is SessionState.COMMITTED


def test_retry_without_reapply_rebases_to_clean(service, session, economics):
    service.update_record(economics.department_id, {"name": "Finance"}, 1)
    session.edit(name="Econ")
    session.submit()

    assert session.retry(reapply=False) is None

    assert session.state is SessionState.CLEAN
    assert session.expected_version == 2
    assert session.snapshot.intended == {}
    assert session.snapshot.base_values["name"] == "Finance"


def test_session_refuses_to_resubmit_a_rejected_version(service, session, economics):
    service.update_record(economics.department_id, {"name": "Finance"}, 1)
    session.edit(name="Econ")
    session.submit()
    session.retry(reapply=False)

    # Force the stale version back in; the session must not send it.
    session.snapshot = replace(session.snapshot, base_version=1)
    with pytest.raises(InvalidTransition):
        session.submit()
    assert session.state is SessionState.CLEAN


def test_retry_can_conflict_again(service, session, economics):
    service.update_record(economics.department_id, {"budget": 1}, 1)
    session.edit(budget=2)
    session.submit()
    service.update_record(economics.department_id, {"budget": 3}, 2)

    outcome = session.retry()

    assert isinstance(outcome, Stale)
    assert outcome.report.current_version == 3
    assert session.state is SessionState.CONFLICTED
    assert isinstance(session.retry(), Updated)


def test_discard_from_conflicted(service, session, economics):
    service.update_record(economics.department_id, {"budget": 1}, 1)
    session.edit(budget=2)
    session.submit()

    session.discard()

    assert session.state is SessionState.DISCARDED
    assert service.get_record(economics.department_id).budget == Decimal("1.00")
    with pytest.raises(InvalidTransition):
        session.retry()


def test_deleted_by_other_writer_is_gone_and_terminal(service, session, economics):
    service.delete_record(economics.department_id, 1)
    session.edit(name="Econ")

    outcome = session.submit()

    assert isinstance(outcome, Gone)
    assert session.state is SessionState.GONE
    with pytest.raises(InvalidTransition):
        session.retry()
    with pytest.raises(InvalidTransition):
        session.edit(name="Again")
    session.discard()
    assert session.state is SessionState.DISCARDED


def test_blocked_delete_only_exits_by_discard(session, course_repo, economics):
    course_repo.create(Course(course_id=4041, title="Macroeconomics", credits=3,
                              department_id=economics.department_id))

    outcome = session.submit_delete()

    assert isinstance(outcome, Blocked)
    assert session.state is SessionState.BLOCKED
    assert session.block.dependent_count == 1
    with pytest.raises(InvalidTransition):
        session.retry()
    with pytest.raises(InvalidTransition):
        session.submit_delete()
    session.discard()
    assert session.state is SessionState.DISCARDED


def test_stale_delete_retries_on_fresh_version(service, session, economics):
    service.update_record(economics.department_id, {"budget": 1}, 1)

    outcome = session.submit_delete()
    assert isinstance(outcome, Stale)
    rows = {row.field: row for row in session.comparison()}
    assert set(rows) == {"name", "budget", "start_date", "instructor_id"}
    assert not any(row.differs for row in rows.values())

    session.retry()
    assert session.state is SessionState.COMMITTED
    assert session.record is None


def test_invalid_patch_returns_to_clean(session):
    session.edit(budget=-5)
    outcome = session.submit()

    assert isinstance(outcome, Invalid)
    assert session.state is SessionState.CLEAN
    assert session.errors

    session.edit(budget=5)
    assert isinstance(session.submit(), Updated)


def test_cannot_submit_twice_after_commit(session):
    session.edit(name="Econ")
    session.submit()
    with pytest.raises(InvalidTransition):
        session.submit()
