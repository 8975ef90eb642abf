# classroll/db/models/class_session.py
from sqlalchemy import (
    Column, Integer, Date, DateTime, ForeignKey, Enum, UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from classroll.core.states import SessionStatus
from classroll.db.base import Base


class ClassSession(Base):
    __tablename__ = "class_sessions"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    date = Column(Date, nullable=False)
    # Minutes since midnight, start < end
    start_minutes = Column(Integer, nullable=False)
    end_minutes = Column(Integer, nullable=False)
    status = Column(
        Enum(SessionStatus, name="session_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SessionStatus.PLANNED,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    program_links = relationship(
        "SessionProgram",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="SessionProgram.program_id",
    )

    __table_args__ = (
        UniqueConstraint("course_id", "date", "start_minutes", "room_id", name="uq_session_course_slot_room"),
        Index("ix_session_teacher_date", "teacher_id", "date"),
        Index("ix_session_room_date", "room_id", "date"),
    )

    @property
    def program_ids(self):
        return [link.program_id for link in self.program_links]

    @program_ids.setter
    def program_ids(self, ids):
        current = {link.program_id: link for link in self.program_links}
        self.program_links = [
            current.get(pid) or SessionProgram(program_id=pid) for pid in dict.fromkeys(ids)
        ]


class SessionProgram(Base):
    __tablename__ = "class_session_programs"

    session_id = Column(Integer, ForeignKey("class_sessions.id", ondelete="CASCADE"), primary_key=True)
    program_id = Column(Integer, ForeignKey("programs.id"), primary_key=True)
