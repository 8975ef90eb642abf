# classroll/db/__init__.py
# Importing the package registers every model on Base.metadata

from classroll.db.models import (
    Base, User, Program, Room, Course, CourseProgram, Student, ClassSession, SessionProgram, Presence,
)

__all__ = [
    "Base", "User", "Program", "Room", "Course", "CourseProgram", "Student",
    "ClassSession", "SessionProgram", "Presence",
]
