# classroll/db/models/catalog.py
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from classroll.db.base import Base


class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)  # e.g. "Computer Engineering - 2nd year"


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)  # e.g. "Amphi 1", "B203"


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)

    # programs that follow this course
    program_links = relationship(
        "CourseProgram",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CourseProgram.program_id",
    )

    @property
    def program_ids(self):
        return [link.program_id for link in self.program_links]

    @program_ids.setter
    def program_ids(self, ids):
        current = {link.program_id: link for link in self.program_links}
        self.program_links = [
            current.get(pid) or CourseProgram(program_id=pid) for pid in dict.fromkeys(ids)
        ]


class CourseProgram(Base):
    __tablename__ = "course_programs"

    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True)
    program_id = Column(Integer, ForeignKey("programs.id"), primary_key=True)


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    matricule = Column(String, unique=True, nullable=False)
    full_name = Column(String, nullable=False)
    tag_id = Column(String, unique=True, index=True, nullable=False)  # NFC tag
    photo_url = Column(String, nullable=True)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=False, index=True)
