# classroll/services/enrich.py
"""Response shaping.

Referenced entities are fetched through explicit catalog lookups; nothing
here relies on ORM relationship loading.
"""
from classroll.crud.catalog import CatalogLookup
from classroll.db.models.class_session import ClassSession
from classroll.db.models.presence import Presence
from classroll.schemas.catalog import (
    CourseOut, ProgramOut, RoomOut, StudentSummary, TeacherSummary,
)
from classroll.schemas.class_session import ClassSessionOut
from classroll.schemas.presence import PresenceOut, SessionSummary
from classroll.services.timeslots import to_hhmm


def _summary(schema, obj):
    return schema.model_validate(obj) if obj is not None else None


def _approver(catalog: CatalogLookup, teacher_id):
    if teacher_id is None:
        return None
    return _summary(TeacherSummary, catalog.teacher(teacher_id))


def session_out(catalog: CatalogLookup, session: ClassSession) -> ClassSessionOut:
    programs = [catalog.program(pid) for pid in session.program_ids]
    return ClassSessionOut(
        id=session.id,
        date=session.date,
        start=to_hhmm(session.start_minutes),
        end=to_hhmm(session.end_minutes),
        status=session.status,
        course=_summary(CourseOut, catalog.course(session.course_id)),
        teacher=_summary(TeacherSummary, catalog.teacher(session.teacher_id)),
        room=_summary(RoomOut, catalog.room(session.room_id)),
        programs=[ProgramOut.model_validate(p) for p in programs if p is not None],
    )


def session_summary(catalog: CatalogLookup, session: ClassSession) -> SessionSummary:
    return SessionSummary(
        id=session.id,
        date=session.date,
        start=to_hhmm(session.start_minutes),
        end=to_hhmm(session.end_minutes),
        course=_summary(CourseOut, catalog.course(session.course_id)),
        room=_summary(RoomOut, catalog.room(session.room_id)),
    )


def presence_out(catalog: CatalogLookup, presence: Presence, session: ClassSession) -> PresenceOut:
    return PresenceOut(
        id=presence.id,
        status=presence.status,
        scanned_at=presence.scanned_at,
        decided_at=presence.decided_at,
        student=_summary(StudentSummary, catalog.student(presence.student_id)),
        session=session_summary(catalog, session),
        approved_by=_approver(catalog, presence.approved_by_id),
    )
