# classroll/schemas/presence.py
from datetime import date as date_type, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from classroll.core.states import ApprovalStatus
from classroll.schemas.catalog import CourseOut, RoomOut, StudentSummary, TeacherSummary
from classroll.schemas.class_session import ClassSessionOut


class ScanRequest(BaseModel):
    tag_id: str = Field(min_length=1)
    session_id: int


class DecisionRequest(BaseModel):
    decision: ApprovalStatus


class SessionSummary(BaseModel):
    id: int
    date: date_type
    start: str
    end: str
    course: Optional[CourseOut] = None
    room: Optional[RoomOut] = None


class PresenceOut(BaseModel):
    id: int
    status: ApprovalStatus
    scanned_at: datetime
    decided_at: Optional[datetime] = None
    student: Optional[StudentSummary] = None
    session: SessionSummary
    approved_by: Optional[TeacherSummary] = None


class ScanResult(BaseModel):
    outcome: str
    message: str
    data: PresenceOut


class SessionRollOut(BaseModel):
    session: ClassSessionOut
    presences: List[PresenceOut]
    absentees: List[StudentSummary]
    total_enrolled: int
    total_approved: int
