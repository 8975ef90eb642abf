from classroll.db.base import Base
from classroll.db.models.user import User
from classroll.db.models.catalog import Program, Room, Course, CourseProgram, Student
from classroll.db.models.class_session import ClassSession, SessionProgram
from classroll.db.models.presence import Presence

__all__ = [
    "Base", "User", "Program", "Room", "Course", "CourseProgram", "Student",
    "ClassSession", "SessionProgram", "Presence",
]
