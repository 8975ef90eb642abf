# classroll/services/workflow.py
"""Presence approval workflow.

    (no record) --scan--> pending --decide--> approved | rejected
    rejected --scan--> pending

Approved is terminal. Re-scanning a pending or approved record returns it
unchanged.
"""
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroll.core import errors
from classroll.core.states import (
    CLOSED_SESSION_STATUSES, ApprovalStatus, SessionStatus, can_decide, scan_resets,
)
from classroll.crud import class_session as crud_session
from classroll.crud import presence as crud_presence
from classroll.crud.catalog import CatalogLookup
from classroll.db.models.catalog import Student
from classroll.db.models.class_session import ClassSession
from classroll.db.models.presence import Presence
from classroll.services.enrich import presence_out
from classroll.services.notifications import PRESENCE_CREATED, PRESENCE_DECIDED, Publisher

logger = logging.getLogger(__name__)


class ScanOutcome(str, enum.Enum):
    CREATED = "created"
    RESET = "reset"
    ALREADY_PENDING = "already_pending"
    ALREADY_APPROVED = "already_approved"


@dataclass
class SessionRoll:
    session: ClassSession
    presences: List[Presence] = field(default_factory=list)
    absentees: List[Student] = field(default_factory=list)
    total_enrolled: int = 0
    total_approved: int = 0


class PresenceWorkflow:
    def __init__(self, db: Session, catalog: CatalogLookup, publisher: Publisher):
        self.db = db
        self.catalog = catalog
        self.publisher = publisher

    def record_scan(self, tag_id: str, session_id: int):
        session = crud_session.get_session(self.db, session_id)
        if session is None:
            raise errors.NotFoundError(f"Session {session_id} not found")
        status = SessionStatus(session.status)
        if status in CLOSED_SESSION_STATUSES:
            raise errors.ConflictError(
                f"Cannot record presence for a session that is {status.value}"
            )

        student = self.catalog.student_by_tag(tag_id)
        if student is None:
            raise errors.NotFoundError(f"No student found with tag '{tag_id}'")

        if student.program_id not in session.program_ids:
            logger.info(
                f"[Presence] student {student.id} scanned into session {session_id} outside its programs"
            )
            raise errors.ValidationError(
                f"Student {student.full_name} does not belong to any program of this session"
            )

        presence = crud_presence.find_presence(self.db, student.id, session.id)
        if presence is None:
            outcome, presence = self._create_pending(student, session)
        elif scan_resets(ApprovalStatus(presence.status)):
            outcome, presence = self._reset(presence)
        elif presence.status == ApprovalStatus.APPROVED:
            return ScanOutcome.ALREADY_APPROVED, presence
        else:
            return ScanOutcome.ALREADY_PENDING, presence

        if outcome in (ScanOutcome.CREATED, ScanOutcome.RESET):
            logger.info(f"✅ [Presence] {outcome.value}: student={student.id} session={session.id}")
            self._publish(session, presence, PRESENCE_CREATED)
        return outcome, presence

    def decide(self, presence_id: int, acting_teacher_id: int, decision) -> Presence:
        presence = crud_presence.get_presence(self.db, presence_id)
        if presence is None:
            raise errors.NotFoundError(f"Presence {presence_id} not found")
        session = crud_session.get_session(self.db, presence.session_id)
        if session is None:
            raise errors.NotFoundError(f"Session of presence {presence_id} not found")

        if session.teacher_id != acting_teacher_id:
            logger.warning(
                f"⚠️ [Presence] teacher {acting_teacher_id} tried to decide presence {presence_id} "
                f"of session {session.id}"
            )
            raise errors.AuthorizationError("You are not the teacher of this session")

        try:
            decision = ApprovalStatus(decision)
        except ValueError:
            raise errors.ValidationError(f"Unknown decision '{decision}'")
        if decision not in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED):
            raise errors.ValidationError("Decision must be approved or rejected")

        current = ApprovalStatus(presence.status)
        if not can_decide(current, decision):
            raise errors.ConflictError(f"Presence already decided ({current.value})")

        if not crud_presence.apply_decision(
            self.db, presence.id, decision, acting_teacher_id, datetime.utcnow()
        ):
            # another decision committed between our read and write
            self.db.rollback()
            self.db.refresh(presence)
            raise errors.ConflictError(f"Presence already decided ({presence.status.value})")
        self.db.commit()
        self.db.refresh(presence)

        logger.info(f"✅ [Presence] {presence.id} {decision.value} by teacher {acting_teacher_id}")
        self._publish(session, presence, PRESENCE_DECIDED)
        return presence

    def list_for_session(self, session_id: int) -> SessionRoll:
        session = crud_session.get_session(self.db, session_id)
        if session is None:
            raise errors.NotFoundError(f"Session {session_id} not found")

        presences = crud_presence.get_presences_for_session(self.db, session_id)
        enrolled = self.catalog.students_in_programs(session.program_ids)
        approved = {p.student_id for p in presences if p.status == ApprovalStatus.APPROVED}

        return SessionRoll(
            session=session,
            presences=presences,
            absentees=[s for s in enrolled if s.id not in approved],
            total_enrolled=len(enrolled),
            total_approved=len(approved),
        )

    def list_pending_for_teacher(self, teacher_id: int) -> List[Presence]:
        return crud_presence.get_pending_for_teacher(self.db, teacher_id)

    def _create_pending(self, student: Student, session: ClassSession):
        presence = Presence(
            student_id=student.id,
            session_id=session.id,
            scanned_at=datetime.utcnow(),
            status=ApprovalStatus.PENDING,
        )
        self.db.add(presence)
        try:
            self.db.commit()
        except IntegrityError:
            # a concurrent scan created it first
            self.db.rollback()
            existing = crud_presence.find_presence(self.db, student.id, session.id)
            if existing is None:
                raise
            status = ApprovalStatus(existing.status)
            if status == ApprovalStatus.APPROVED:
                return ScanOutcome.ALREADY_APPROVED, existing
            if scan_resets(status):
                return self._reset(existing)
            return ScanOutcome.ALREADY_PENDING, existing
        self.db.refresh(presence)
        return ScanOutcome.CREATED, presence

    def _reset(self, presence: Presence):
        if not crud_presence.reset_rejected(self.db, presence.id, datetime.utcnow()):
            self.db.rollback()
            self.db.refresh(presence)
            return ScanOutcome.ALREADY_PENDING, presence
        self.db.commit()
        self.db.refresh(presence)
        return ScanOutcome.RESET, presence

    def _publish(self, session: ClassSession, presence: Presence, event_kind: str) -> None:
        try:
            payload = presence_out(self.catalog, presence, session).model_dump(mode="json")
            self.publisher.publish(session.id, event_kind, payload)
        except Exception:
            # the write is committed; observers just miss this event
            logger.exception(f"🔥 [Presence] publishing {event_kind} for presence {presence.id} failed")
