# classroll/crud/class_session.py
from datetime import date as date_type
from typing import Optional

from sqlalchemy.orm import Session

from classroll.core.states import SessionStatus
from classroll.db.models.class_session import ClassSession
from classroll.db.models.presence import Presence


def get_session(db: Session, session_id: int):
    return db.get(ClassSession, session_id)


def get_sessions(
    db: Session,
    date: Optional[date_type] = None,
    teacher_id: Optional[int] = None,
    room_id: Optional[int] = None,
    status: Optional[SessionStatus] = None,
):
    query = db.query(ClassSession)
    if date is not None:
        query = query.filter(ClassSession.date == date)
    if teacher_id is not None:
        query = query.filter(ClassSession.teacher_id == teacher_id)
    if room_id is not None:
        query = query.filter(ClassSession.room_id == room_id)
    if status is not None:
        query = query.filter(ClassSession.status == status)
    return query.order_by(ClassSession.date, ClassSession.start_minutes, ClassSession.id).all()


def find_clash(
    db: Session,
    date: date_type,
    start_minutes: int,
    end_minutes: int,
    teacher_id: Optional[int] = None,
    room_id: Optional[int] = None,
    exclude_id: Optional[int] = None,
):
    """First non-cancelled session on ``date`` whose [start, end) overlaps the given window.

    Scoped to the teacher or the room, whichever is given. Touching windows
    (one ends when the other starts) do not clash.
    """
    query = db.query(ClassSession).filter(
        ClassSession.date == date,
        ClassSession.status != SessionStatus.CANCELLED,
        ClassSession.start_minutes < end_minutes,
        ClassSession.end_minutes > start_minutes,
    )
    if teacher_id is not None:
        query = query.filter(ClassSession.teacher_id == teacher_id)
    if room_id is not None:
        query = query.filter(ClassSession.room_id == room_id)
    if exclude_id is not None:
        query = query.filter(ClassSession.id != exclude_id)
    return query.order_by(ClassSession.start_minutes, ClassSession.id).first()


def has_presences(db: Session, session_id: int) -> bool:
    return db.query(Presence.id).filter(Presence.session_id == session_id).first() is not None
