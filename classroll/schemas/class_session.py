# classroll/schemas/class_session.py
from datetime import date as date_type
from typing import List, Optional

from pydantic import BaseModel

from classroll.core.states import SessionStatus
from classroll.schemas.catalog import CourseOut, ProgramOut, RoomOut, TeacherSummary


class ClassSessionCreate(BaseModel):
    course_id: int
    teacher_id: int
    room_id: int
    program_ids: List[int]
    date: date_type
    start: str
    end: str


class ClassSessionUpdate(BaseModel):
    course_id: Optional[int] = None
    teacher_id: Optional[int] = None
    room_id: Optional[int] = None
    program_ids: Optional[List[int]] = None
    date: Optional[date_type] = None
    start: Optional[str] = None
    end: Optional[str] = None
    status: Optional[SessionStatus] = None


class ClassSessionOut(BaseModel):
    id: int
    date: date_type
    start: str
    end: str
    status: SessionStatus
    course: Optional[CourseOut] = None
    teacher: Optional[TeacherSummary] = None
    room: Optional[RoomOut] = None
    programs: List[ProgramOut] = []


class SessionRemovalOut(BaseModel):
    outcome: str
    message: str
    data: Optional[ClassSessionOut] = None
