# classroll/services/scheduler.py
"""Class session scheduling.

A teacher and a room can each hold only one non-cancelled session at any
instant of a given day. Windows are half-open, so 09:00-11:00 and
11:00-12:00 do not clash.
"""
import enum
import logging
from datetime import date as date_type
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroll.core import errors
from classroll.core.states import CLOSED_SESSION_STATUSES, SessionStatus, can_move_session
from classroll.crud import class_session as crud_session
from classroll.crud.catalog import CatalogLookup
from classroll.db.models.class_session import ClassSession
from classroll.services.locks import schedule_lock, slot_keys
from classroll.services.timeslots import parse_window, to_minutes, window

logger = logging.getLogger(__name__)

SCHEDULE_FIELDS = ("teacher_id", "room_id", "date", "start", "end")
EDITABLE_FIELDS = ("course_id", "program_ids") + SCHEDULE_FIELDS + ("status",)


class RemovalOutcome(str, enum.Enum):
    DELETED = "deleted"
    CANCELLED = "cancelled"
    ALREADY_CANCELLED = "already_cancelled"


class Scheduler:
    def __init__(self, db: Session, catalog: CatalogLookup):
        self.db = db
        self.catalog = catalog

    # --- reads ---

    def get(self, session_id: int) -> ClassSession:
        session = crud_session.get_session(self.db, session_id)
        if session is None:
            raise errors.NotFoundError(f"Session {session_id} not found")
        return session

    def list_sessions(self, date=None, teacher_id=None, room_id=None, status=None):
        return crud_session.get_sessions(
            self.db, date=date, teacher_id=teacher_id, room_id=room_id, status=status
        )

    # --- writes ---

    def create(
        self,
        course_id: int,
        teacher_id: int,
        room_id: int,
        program_ids: Iterable[int],
        date: date_type,
        start,
        end,
    ) -> ClassSession:
        program_ids = list(program_ids or [])
        if not program_ids:
            raise errors.ValidationError("At least one program must be specified")
        self._check_course(course_id)
        self._check_teacher(teacher_id)
        self._check_room(room_id)
        self._check_programs(program_ids)
        start_minutes, end_minutes = parse_window(start, end)

        session = ClassSession(
            course_id=course_id,
            teacher_id=teacher_id,
            room_id=room_id,
            date=date,
            start_minutes=start_minutes,
            end_minutes=end_minutes,
            status=SessionStatus.PLANNED,
        )
        session.program_ids = program_ids

        with schedule_lock(self.db, slot_keys(teacher_id, room_id, date)):
            try:
                self._ensure_free(session)
                self.db.add(session)
                self._commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(session)
        logger.info(
            f"✅ [Scheduler] Session {session.id} planned: teacher={teacher_id} room={room_id} "
            f"{date} {window(start_minutes, end_minutes)}"
        )
        return session

    def update(self, session_id: int, changes: dict) -> ClassSession:
        session = self.get(session_id)
        # resent values equal to the stored ones are not edits
        changes = {
            k: v for k, v in changes.items()
            if k in EDITABLE_FIELDS and v is not None and (k == "status" or self._differs(session, k, v))
        }
        current = SessionStatus(session.status)

        target = SessionStatus(changes.get("status", current))

        if current in CLOSED_SESSION_STATUSES and set(changes) - {"status"}:
            raise errors.ConflictError(
                f"Session {session_id} is {current.value}; only its status can be changed"
            )
        if not can_move_session(current, target):
            raise errors.ConflictError(
                f"Session {session_id} cannot move from {current.value} to {target.value}"
            )

        if "course_id" in changes and changes["course_id"] != session.course_id:
            self._check_course(changes["course_id"])
        if "teacher_id" in changes and changes["teacher_id"] != session.teacher_id:
            self._check_teacher(changes["teacher_id"])
        if "room_id" in changes and changes["room_id"] != session.room_id:
            self._check_room(changes["room_id"])
        if "program_ids" in changes:
            program_ids = list(changes["program_ids"])
            if not program_ids:
                raise errors.ValidationError("At least one program must be specified")
            self._check_programs(program_ids)

        start_minutes, end_minutes = parse_window(
            changes.get("start", session.start_minutes),
            changes.get("end", session.end_minutes),
        )

        for field in ("course_id", "teacher_id", "room_id", "date"):
            if field in changes:
                setattr(session, field, changes[field])
        if "program_ids" in changes:
            session.program_ids = changes["program_ids"]
        session.start_minutes = start_minutes
        session.end_minutes = end_minutes
        session.status = target

        reschedule = any(field in changes for field in SCHEDULE_FIELDS)
        with schedule_lock(self.db, slot_keys(session.teacher_id, session.room_id, session.date)):
            try:
                if reschedule and target != SessionStatus.CANCELLED:
                    self._ensure_free(session, exclude_id=session.id)
                self._commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(session)
        logger.info(f"✏️ [Scheduler] Session {session.id} updated: {sorted(changes)}")
        return session

    def cancel_or_remove(self, session_id: int):
        """Delete a session, or cancel it when presences already point at it."""
        session = self.get(session_id)

        if not crud_session.has_presences(self.db, session_id):
            self.db.delete(session)
            self.db.commit()
            logger.info(f"🗑️ [Scheduler] Session {session_id} deleted")
            return RemovalOutcome.DELETED, None

        if session.status == SessionStatus.CANCELLED:
            return RemovalOutcome.ALREADY_CANCELLED, session

        session.status = SessionStatus.CANCELLED
        self.db.commit()
        self.db.refresh(session)
        logger.info(f"🚫 [Scheduler] Session {session_id} cancelled, presence records kept")
        return RemovalOutcome.CANCELLED, session

    # --- helpers ---

    def _ensure_free(self, session: ClassSession, exclude_id: Optional[int] = None) -> None:
        clash = crud_session.find_clash(
            self.db,
            date=session.date,
            start_minutes=session.start_minutes,
            end_minutes=session.end_minutes,
            teacher_id=session.teacher_id,
            exclude_id=exclude_id,
        )
        if clash is not None:
            logger.warning(
                f"⚠️ [Scheduler] Teacher {session.teacher_id} clash with session {clash.id} on {session.date}"
            )
            raise errors.ConflictError(
                f"Teacher is already assigned to session {clash.id} "
                f"({window(clash.start_minutes, clash.end_minutes)}) which overlaps this period"
            )

        clash = crud_session.find_clash(
            self.db,
            date=session.date,
            start_minutes=session.start_minutes,
            end_minutes=session.end_minutes,
            room_id=session.room_id,
            exclude_id=exclude_id,
        )
        if clash is not None:
            logger.warning(
                f"⚠️ [Scheduler] Room {session.room_id} clash with session {clash.id} on {session.date}"
            )
            raise errors.ConflictError(
                f"Room is already booked for session {clash.id} "
                f"({window(clash.start_minutes, clash.end_minutes)}) which overlaps this period"
            )

    @staticmethod
    def _differs(session: ClassSession, field: str, value) -> bool:
        if field == "start":
            return to_minutes(value) != session.start_minutes
        if field == "end":
            return to_minutes(value) != session.end_minutes
        if field == "program_ids":
            return set(value) != set(session.program_ids) or not value
        return getattr(session, field) != value

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise errors.ConflictError(
                "An identical session (course, date, start time, room) already exists"
            )

    def _check_course(self, course_id: int) -> None:
        if self.catalog.course(course_id) is None:
            raise errors.ValidationError(f"Course {course_id} not found")

    def _check_teacher(self, teacher_id: int) -> None:
        if self.catalog.teacher(teacher_id) is None:
            raise errors.ValidationError(f"Teacher {teacher_id} not found")

    def _check_room(self, room_id: int) -> None:
        if self.catalog.room(room_id) is None:
            raise errors.ValidationError(f"Room {room_id} not found")

    def _check_programs(self, program_ids) -> None:
        for program_id in program_ids:
            if self.catalog.program(program_id) is None:
                raise errors.ValidationError(f"Program {program_id} not found")
