# classroll/crud/catalog.py
"""Catalog reads and writes.

``SqlCatalog`` is the lookup the scheduler and the presence workflow are
built against; they only see the ``CatalogLookup`` protocol.
"""
from typing import Iterable, List, Optional, Protocol

from sqlalchemy.orm import Session

from classroll.db.models.catalog import Course, CourseProgram, Program, Room, Student
from classroll.db.models.class_session import ClassSession, SessionProgram
from classroll.db.models.presence import Presence
from classroll.db.models.user import User


class CatalogLookup(Protocol):
    def course(self, course_id: int) -> Optional[Course]: ...

    def teacher(self, teacher_id: int) -> Optional[User]: ...

    def room(self, room_id: int) -> Optional[Room]: ...

    def program(self, program_id: int) -> Optional[Program]: ...

    def student(self, student_id: int) -> Optional[Student]: ...

    def student_by_tag(self, tag_id: str) -> Optional[Student]: ...

    def students_in_programs(self, program_ids: Iterable[int]) -> List[Student]: ...


class SqlCatalog:
    def __init__(self, db: Session):
        self.db = db

    def course(self, course_id):
        return self.db.get(Course, course_id)

    def teacher(self, teacher_id):
        user = self.db.get(User, teacher_id)
        if user is None or user.role != "teacher":
            return None
        return user

    def room(self, room_id):
        return self.db.get(Room, room_id)

    def program(self, program_id):
        return self.db.get(Program, program_id)

    def student(self, student_id):
        return self.db.get(Student, student_id)

    def student_by_tag(self, tag_id):
        return self.db.query(Student).filter(Student.tag_id == tag_id.strip()).first()

    def students_in_programs(self, program_ids):
        ids = list(program_ids)
        if not ids:
            return []
        return (
            self.db.query(Student)
            .filter(Student.program_id.in_(ids))
            .order_by(Student.full_name, Student.id)
            .all()
        )


def _add(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def create_program(db: Session, name: str):
    return _add(db, Program(name=name.strip()))


def get_program(db: Session, program_id: int):
    return db.get(Program, program_id)


def get_programs(db: Session):
    return db.query(Program).order_by(Program.name).all()


def create_room(db: Session, name: str):
    return _add(db, Room(name=name.strip()))


def get_room(db: Session, room_id: int):
    return db.get(Room, room_id)


def get_rooms(db: Session):
    return db.query(Room).order_by(Room.name).all()


def create_course(db: Session, title: str, program_ids: Iterable[int] = ()):
    course = Course(title=title.strip())
    course.program_ids = list(program_ids)
    return _add(db, course)


def get_course(db: Session, course_id: int):
    return db.get(Course, course_id)


def get_courses(db: Session):
    return db.query(Course).order_by(Course.title).all()


def create_student(db: Session, student_data):
    return _add(db, Student(
        matricule=student_data.matricule.strip(),
        full_name=student_data.full_name.strip(),
        tag_id=student_data.tag_id.strip(),
        photo_url=student_data.photo_url,
        program_id=student_data.program_id,
    ))


def get_student(db: Session, student_id: int):
    return db.get(Student, student_id)


def get_students(db: Session, program_id: Optional[int] = None):
    query = db.query(Student)
    if program_id is not None:
        query = query.filter(Student.program_id == program_id)
    return query.order_by(Student.full_name).all()


def update_entity(db: Session, obj, changes: dict):
    """Apply ``changes`` to a catalog row. String values are stripped."""
    for field, value in changes.items():
        if isinstance(value, str):
            value = value.strip()
        setattr(obj, field, value)
    db.commit()
    db.refresh(obj)
    return obj


def delete_entity(db: Session, obj) -> None:
    db.delete(obj)
    db.commit()


# Reference checks used before deleting. Each returns a reason, or None when
# nothing points at the row any more.

def _exists(db: Session, column, value) -> bool:
    return db.query(column).filter(column == value).first() is not None


def program_in_use(db: Session, program_id: int) -> Optional[str]:
    if _exists(db, Student.program_id, program_id):
        return "students are enrolled in it"
    if _exists(db, SessionProgram.program_id, program_id):
        return "sessions are scheduled for it"
    if _exists(db, CourseProgram.program_id, program_id):
        return "courses are attached to it"
    return None


def room_in_use(db: Session, room_id: int) -> Optional[str]:
    if _exists(db, ClassSession.room_id, room_id):
        return "sessions are scheduled in it"
    return None


def course_in_use(db: Session, course_id: int) -> Optional[str]:
    if _exists(db, ClassSession.course_id, course_id):
        return "sessions are scheduled for it"
    return None


def student_in_use(db: Session, student_id: int) -> Optional[str]:
    if _exists(db, Presence.student_id, student_id):
        return "presence records reference it"
    return None


def teacher_in_use(db: Session, teacher_id: int) -> Optional[str]:
    if _exists(db, ClassSession.teacher_id, teacher_id):
        return "sessions are assigned to this teacher"
    if _exists(db, Presence.approved_by_id, teacher_id):
        return "presence decisions were made by this teacher"
    return None
