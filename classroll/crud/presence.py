# classroll/crud/presence.py
from datetime import datetime

from sqlalchemy.orm import Session

from classroll.core.states import ACTIVE_SESSION_STATUSES, ApprovalStatus
from classroll.db.models.class_session import ClassSession
from classroll.db.models.presence import Presence


def get_presence(db: Session, presence_id: int):
    return db.get(Presence, presence_id)


def find_presence(db: Session, student_id: int, session_id: int):
    return db.query(Presence).filter(
        Presence.student_id == student_id,
        Presence.session_id == session_id,
    ).first()


def get_presences_for_session(db: Session, session_id: int):
    return (
        db.query(Presence)
        .filter(Presence.session_id == session_id)
        .order_by(Presence.scanned_at, Presence.id)
        .all()
    )


def get_pending_for_teacher(db: Session, teacher_id: int):
    return (
        db.query(Presence)
        .join(ClassSession, ClassSession.id == Presence.session_id)
        .filter(
            ClassSession.teacher_id == teacher_id,
            ClassSession.status.in_(list(ACTIVE_SESSION_STATUSES)),
            Presence.status == ApprovalStatus.PENDING,
        )
        .order_by(Presence.scanned_at, Presence.id)
        .all()
    )


def reset_rejected(db: Session, presence_id: int, scanned_at: datetime) -> bool:
    """Move a rejected record back to pending. False if it was no longer rejected."""
    updated = db.query(Presence).filter(
        Presence.id == presence_id,
        Presence.status == ApprovalStatus.REJECTED,
    ).update(
        {
            Presence.status: ApprovalStatus.PENDING,
            Presence.approved_by_id: None,
            Presence.decided_at: None,
            Presence.scanned_at: scanned_at,
        },
        synchronize_session=False,
    )
    return updated == 1


def apply_decision(
    db: Session,
    presence_id: int,
    decision: ApprovalStatus,
    teacher_id: int,
    decided_at: datetime,
) -> bool:
    """Decide a pending record. False if another decision got there first."""
    updated = db.query(Presence).filter(
        Presence.id == presence_id,
        Presence.status == ApprovalStatus.PENDING,
    ).update(
        {
            Presence.status: decision,
            Presence.approved_by_id: teacher_id,
            Presence.decided_at: decided_at,
        },
        synchronize_session=False,
    )
    return updated == 1
