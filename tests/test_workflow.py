import threading

import pytest

from classroll.core.errors import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError,
)
from classroll.core.states import ApprovalStatus, SessionStatus
from classroll.crud import presence as crud_presence
from classroll.db.models.presence import Presence
from classroll.services.notifications import PRESENCE_CREATED, PRESENCE_DECIDED
from classroll.services.workflow import ScanOutcome


def presence_count(db):
    return db.query(Presence).count()


class TestRecordScan:
    def test_first_scan_creates_pending_and_publishes(self, workflow, planned, seed, publisher):
        outcome, presence = workflow.record_scan("TAG-X", planned.id)
        assert outcome == ScanOutcome.CREATED
        assert presence.status == ApprovalStatus.PENDING
        assert presence.student_id == seed.x.id
        assert presence.scanned_at is not None
        assert presence.approved_by_id is None

        assert len(publisher.events) == 1
        session_id, kind, payload = publisher.events[0]
        assert (session_id, kind) == (planned.id, PRESENCE_CREATED)
        assert payload["student"]["full_name"] == "Xavier Alami"
        assert payload["session"]["start"] == "09:00"
        assert payload["session"]["course"]["title"] == "Java part 1"
        assert payload["status"] == "pending"

    def test_rescan_while_pending_is_idempotent(self, workflow, planned, db, publisher):
        _, first = workflow.record_scan("TAG-X", planned.id)
        outcome, second = workflow.record_scan("TAG-X", planned.id)
        assert outcome == ScanOutcome.ALREADY_PENDING
        assert second.id == first.id
        assert presence_count(db) == 1
        assert publisher.kinds() == [PRESENCE_CREATED]

    def test_rescan_when_approved_returns_record_unchanged(self, workflow, planned, seed, db, publisher):
        _, presence = workflow.record_scan("TAG-X", planned.id)
        workflow.decide(presence.id, seed.teacher.id, ApprovalStatus.APPROVED)
        decided_at = presence.decided_at

        outcome, again = workflow.record_scan("TAG-X", planned.id)
        assert outcome == ScanOutcome.ALREADY_APPROVED
        assert again.id == presence.id
        assert again.status == ApprovalStatus.APPROVED
        assert again.decided_at == decided_at
        assert presence_count(db) == 1
        assert publisher.kinds() == [PRESENCE_CREATED, PRESENCE_DECIDED]

    def test_rescan_resets_rejected(self, workflow, planned, seed, publisher):
        _, presence = workflow.record_scan("TAG-X", planned.id)
        workflow.decide(presence.id, seed.teacher.id, ApprovalStatus.REJECTED)
        first_scan = presence.scanned_at

        outcome, reset = workflow.record_scan("TAG-X", planned.id)
        assert outcome == ScanOutcome.RESET
        assert reset.id == presence.id
        assert reset.status == ApprovalStatus.PENDING
        assert reset.approved_by_id is None
        assert reset.decided_at is None
        assert reset.scanned_at >= first_scan

        # one reset per scan; a further scan sees it pending
        outcome, _ = workflow.record_scan("TAG-X", planned.id)
        assert outcome == ScanOutcome.ALREADY_PENDING
        assert publisher.kinds() == [PRESENCE_CREATED, PRESENCE_DECIDED, PRESENCE_CREATED]

    def test_unknown_session(self, workflow, seed):
        with pytest.raises(NotFoundError):
            workflow.record_scan("TAG-X", 9999)

    @pytest.mark.parametrize("status", [SessionStatus.COMPLETED, SessionStatus.CANCELLED])
    def test_closed_session(self, workflow, scheduler, planned, status):
        scheduler.update(planned.id, {"status": status})
        with pytest.raises(ConflictError):
            workflow.record_scan("TAG-X", planned.id)

    def test_unknown_tag(self, workflow, planned, db):
        with pytest.raises(NotFoundError):
            workflow.record_scan("TAG-NOPE", planned.id)
        assert presence_count(db) == 0

    def test_student_outside_session_programs(self, workflow, planned, db, publisher):
        with pytest.raises(ValidationError):
            workflow.record_scan("TAG-Z", planned.id)
        assert presence_count(db) == 0
        assert publisher.events == []

    def test_publish_failure_does_not_undo_the_scan(self, db, planned, seed):
        from classroll.crud.catalog import SqlCatalog
        from classroll.services.workflow import PresenceWorkflow

        class BrokenPublisher:
            def publish(self, session_id, event_kind, payload):
                raise RuntimeError("transport down")

        workflow = PresenceWorkflow(db, SqlCatalog(db), BrokenPublisher())
        outcome, presence = workflow.record_scan("TAG-X", planned.id)
        assert outcome == ScanOutcome.CREATED
        assert presence_count(db) == 1


class TestDecide:
    def test_teacher_approves(self, workflow, planned, seed, publisher):
        _, presence = workflow.record_scan("TAG-X", planned.id)
        decided = workflow.decide(presence.id, seed.teacher.id, "approved")
        assert decided.status == ApprovalStatus.APPROVED
        assert decided.approved_by_id == seed.teacher.id
        assert decided.decided_at is not None

        session_id, kind, payload = publisher.events[-1]
        assert (session_id, kind) == (planned.id, PRESENCE_DECIDED)
        assert payload["approved_by"]["full_name"] == "Teacher T"

    def test_second_decision_conflicts_and_changes_nothing(self, workflow, planned, seed, db):
        _, presence = workflow.record_scan("TAG-X", planned.id)
        workflow.decide(presence.id, seed.teacher.id, ApprovalStatus.APPROVED)
        decided_at = presence.decided_at

        with pytest.raises(ConflictError) as exc:
            workflow.decide(presence.id, seed.teacher.id, ApprovalStatus.REJECTED)
        assert "already decided" in exc.value.detail
        db.refresh(presence)
        assert presence.status == ApprovalStatus.APPROVED
        assert presence.decided_at == decided_at

    def test_rejected_cannot_be_decided_again(self, workflow, planned, seed):
        _, presence = workflow.record_scan("TAG-X", planned.id)
        workflow.decide(presence.id, seed.teacher.id, ApprovalStatus.REJECTED)
        with pytest.raises(ConflictError):
            workflow.decide(presence.id, seed.teacher.id, ApprovalStatus.APPROVED)

    def test_only_the_session_teacher_decides(self, workflow, planned, seed, db):
        _, presence = workflow.record_scan("TAG-X", planned.id)
        with pytest.raises(AuthorizationError):
            workflow.decide(presence.id, seed.other.id, ApprovalStatus.APPROVED)
        db.refresh(presence)
        assert presence.status == ApprovalStatus.PENDING

    def test_pending_is_not_a_decision(self, workflow, planned, seed):
        _, presence = workflow.record_scan("TAG-X", planned.id)
        with pytest.raises(ValidationError):
            workflow.decide(presence.id, seed.teacher.id, ApprovalStatus.PENDING)
        with pytest.raises(ValidationError):
            workflow.decide(presence.id, seed.teacher.id, "maybe")

    def test_unknown_presence(self, workflow, seed):
        with pytest.raises(NotFoundError):
            workflow.decide(9999, seed.teacher.id, ApprovalStatus.APPROVED)

    def test_losing_concurrent_decision_gets_conflict(self, workflow, planned, seed, session_factory):
        _, presence = workflow.record_scan("TAG-X", planned.id)

        # another request decides between this one's read and write
        other_db = session_factory()
        try:
            other = other_db.get(Presence, presence.id)
            other.status = ApprovalStatus.REJECTED
            other.approved_by_id = seed.teacher.id
            other_db.commit()
        finally:
            other_db.close()

        with pytest.raises(ConflictError):
            workflow.decide(presence.id, seed.teacher.id, ApprovalStatus.APPROVED)


class TestListings:
    def test_absentees_are_enrolled_minus_approved(self, workflow, scheduler, planned, seed):
        scheduler.update(planned.id, {"program_ids": [seed.program1.id, seed.program2.id]})
        _, px = workflow.record_scan("TAG-X", planned.id)
        _, py = workflow.record_scan("TAG-Y", planned.id)
        workflow.decide(px.id, seed.teacher.id, ApprovalStatus.APPROVED)
        workflow.decide(py.id, seed.teacher.id, ApprovalStatus.REJECTED)

        roll = workflow.list_for_session(planned.id)
        assert [p.id for p in roll.presences] == [px.id, py.id]
        assert [s.id for s in roll.absentees] == [seed.y.id, seed.z.id]
        assert roll.total_enrolled == 3
        assert roll.total_approved == 1

    def test_pending_only_counts_as_absent(self, workflow, planned, seed):
        workflow.record_scan("TAG-X", planned.id)
        roll = workflow.list_for_session(planned.id)
        assert {s.id for s in roll.absentees} == {seed.x.id, seed.y.id}

    def test_list_for_unknown_session(self, workflow, seed):
        with pytest.raises(NotFoundError):
            workflow.list_for_session(9999)

    def test_pending_for_teacher_skips_closed_sessions(self, workflow, scheduler, planned, seed):
        second = scheduler.create(
            course_id=seed.course2.id, teacher_id=seed.teacher.id, room_id=seed.room2.id,
            program_ids=[seed.program1.id], date=planned.date, start="13:00", end="14:00",
        )
        _, a = workflow.record_scan("TAG-X", planned.id)
        _, b = workflow.record_scan("TAG-Y", planned.id)
        _, c = workflow.record_scan("TAG-X", second.id)
        workflow.decide(b.id, seed.teacher.id, ApprovalStatus.APPROVED)

        assert [p.id for p in workflow.list_pending_for_teacher(seed.teacher.id)] == [a.id, c.id]
        assert workflow.list_pending_for_teacher(seed.other.id) == []

        scheduler.update(second.id, {"status": SessionStatus.COMPLETED})
        assert [p.id for p in workflow.list_pending_for_teacher(seed.teacher.id)] == [a.id]


class TestConcurrentScans:
    def test_simultaneous_scans_make_one_record(self, session_factory, planned, publisher, db):
        from classroll.crud.catalog import SqlCatalog
        from classroll.services.workflow import PresenceWorkflow

        session_id = planned.id
        workers = 4
        barrier = threading.Barrier(workers)
        outcomes = [None] * workers

        def scan(index):
            worker_db = session_factory()
            try:
                workflow = PresenceWorkflow(worker_db, SqlCatalog(worker_db), publisher)
                barrier.wait()
                outcomes[index] = workflow.record_scan("TAG-X", session_id)[0]
            finally:
                worker_db.close()

        threads = [threading.Thread(target=scan, args=(i,)) for i in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert outcomes.count(ScanOutcome.CREATED) == 1
        assert outcomes.count(ScanOutcome.ALREADY_PENDING) == workers - 1
        assert presence_count(db) == 1
        assert publisher.kinds() == [PRESENCE_CREATED]

    def test_lost_insert_race_reports_the_winner_state(self, workflow, planned, seed, monkeypatch):
        _, presence = workflow.record_scan("TAG-X", planned.id)
        workflow.decide(presence.id, seed.teacher.id, ApprovalStatus.APPROVED)

        # the first lookup misses, as if the winning insert had not committed yet
        real_find = crud_presence.find_presence
        calls = []

        def find_after_race(db, student_id, session_id):
            calls.append(student_id)
            if len(calls) == 1:
                return None
            return real_find(db, student_id, session_id)

        monkeypatch.setattr(crud_presence, "find_presence", find_after_race)

        outcome, again = workflow.record_scan("TAG-X", planned.id)
        assert outcome == ScanOutcome.ALREADY_APPROVED
        assert again.id == presence.id
        assert again.status == ApprovalStatus.APPROVED
