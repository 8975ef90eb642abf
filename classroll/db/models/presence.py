# classroll/db/models/presence.py
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint

from classroll.core.states import ApprovalStatus
from classroll.db.base import Base


class Presence(Base):
    __tablename__ = "presences"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    session_id = Column(Integer, ForeignKey("class_sessions.id"), nullable=False, index=True)
    scanned_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # pending -> approved / rejected; rejected -> pending on re-scan
    status = Column(
        Enum(ApprovalStatus, name="approval_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )
    approved_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    decided_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("student_id", "session_id", name="uq_presence_student_session"),
    )
