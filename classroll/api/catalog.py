# classroll/api/catalog.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroll.api.deps import get_db, get_current_user, require_admin
from classroll.core import errors
from classroll.crud import catalog as crud_catalog
from classroll.crud import user as crud_user
from classroll.db.models.user import User
from classroll.schemas.catalog import (
    CourseCreate, CourseOut, CourseUpdate, ProgramCreate, ProgramOut, ProgramUpdate,
    RoomCreate, RoomOut, RoomUpdate, StudentCreate, StudentOut, StudentUpdate,
)
from classroll.schemas.user import TeacherCreate, TeacherUpdate, UserOut

router = APIRouter()


def _save(db: Session, detail: str, write, *args, **kwargs):
    try:
        return write(db, *args, **kwargs)
    except IntegrityError:
        db.rollback()
        raise errors.ConflictError(detail)


def _found(obj, label: str, obj_id: int):
    if obj is None:
        raise HTTPException(status_code=404, detail=f"{label} {obj_id} not found")
    return obj


def _delete(db: Session, obj, label: str, reason: Optional[str]):
    if reason:
        raise errors.ConflictError(f"{label} {obj.id} cannot be deleted: {reason}")
    crud_catalog.delete_entity(db, obj)
    return {"message": f"{label} deleted"}


def _check_programs(db: Session, program_ids):
    for program_id in program_ids:
        if crud_catalog.get_program(db, program_id) is None:
            raise errors.ValidationError(f"Program {program_id} not found")


# --- programs ---

@router.post("/programs", response_model=ProgramOut, status_code=201)
def create_program(
    program_in: ProgramCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return _save(db, "A program with this name already exists",
                 crud_catalog.create_program, program_in.name)


@router.get("/programs", response_model=List[ProgramOut])
def read_programs(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return crud_catalog.get_programs(db)


@router.get("/programs/{program_id}", response_model=ProgramOut)
def read_program(program_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _found(crud_catalog.get_program(db, program_id), "Program", program_id)


@router.put("/programs/{program_id}", response_model=ProgramOut)
def update_program(
    program_id: int,
    program_in: ProgramUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    program = _found(crud_catalog.get_program(db, program_id), "Program", program_id)
    return _save(db, "A program with this name already exists",
                 crud_catalog.update_entity, program, program_in.model_dump(exclude_none=True))


@router.delete("/programs/{program_id}")
def delete_program(program_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    program = _found(crud_catalog.get_program(db, program_id), "Program", program_id)
    return _delete(db, program, "Program", crud_catalog.program_in_use(db, program_id))


# --- rooms ---

@router.post("/rooms", response_model=RoomOut, status_code=201)
def create_room(
    room_in: RoomCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return _save(db, "A room with this name already exists",
                 crud_catalog.create_room, room_in.name)


@router.get("/rooms", response_model=List[RoomOut])
def read_rooms(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return crud_catalog.get_rooms(db)


@router.get("/rooms/{room_id}", response_model=RoomOut)
def read_room(room_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _found(crud_catalog.get_room(db, room_id), "Room", room_id)


@router.put("/rooms/{room_id}", response_model=RoomOut)
def update_room(
    room_id: int,
    room_in: RoomUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    room = _found(crud_catalog.get_room(db, room_id), "Room", room_id)
    return _save(db, "A room with this name already exists",
                 crud_catalog.update_entity, room, room_in.model_dump(exclude_none=True))


@router.delete("/rooms/{room_id}")
def delete_room(room_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    room = _found(crud_catalog.get_room(db, room_id), "Room", room_id)
    return _delete(db, room, "Room", crud_catalog.room_in_use(db, room_id))


# --- courses ---

@router.post("/courses", response_model=CourseOut, status_code=201)
def create_course(
    course_in: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    _check_programs(db, course_in.program_ids)
    return crud_catalog.create_course(db, course_in.title, course_in.program_ids)


@router.get("/courses", response_model=List[CourseOut])
def read_courses(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return crud_catalog.get_courses(db)


@router.get("/courses/{course_id}", response_model=CourseOut)
def read_course(course_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _found(crud_catalog.get_course(db, course_id), "Course", course_id)


@router.put("/courses/{course_id}", response_model=CourseOut)
def update_course(
    course_id: int,
    course_in: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    course = _found(crud_catalog.get_course(db, course_id), "Course", course_id)
    changes = course_in.model_dump(exclude_none=True)
    if "program_ids" in changes:
        _check_programs(db, changes["program_ids"])
    return crud_catalog.update_entity(db, course, changes)


@router.delete("/courses/{course_id}")
def delete_course(course_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    course = _found(crud_catalog.get_course(db, course_id), "Course", course_id)
    return _delete(db, course, "Course", crud_catalog.course_in_use(db, course_id))


# --- students ---

@router.post("/students", response_model=StudentOut, status_code=201)
def create_student(
    student_in: StudentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    _check_programs(db, [student_in.program_id])
    return _save(db, "A student with this matricule or tag already exists",
                 crud_catalog.create_student, student_in)


@router.get("/students", response_model=List[StudentOut])
def read_students(
    program_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud_catalog.get_students(db, program_id=program_id)


@router.get("/students/{student_id}", response_model=StudentOut)
def read_student(student_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _found(crud_catalog.get_student(db, student_id), "Student", student_id)


@router.put("/students/{student_id}", response_model=StudentOut)
def update_student(
    student_id: int,
    student_in: StudentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    student = _found(crud_catalog.get_student(db, student_id), "Student", student_id)
    changes = student_in.model_dump(exclude_unset=True)
    # photo_url may be cleared; the other fields are required on the row
    changes = {k: v for k, v in changes.items() if v is not None or k == "photo_url"}
    if "program_id" in changes:
        _check_programs(db, [changes["program_id"]])
    return _save(db, "A student with this matricule or tag already exists",
                 crud_catalog.update_entity, student, changes)


@router.delete("/students/{student_id}")
def delete_student(student_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    student = _found(crud_catalog.get_student(db, student_id), "Student", student_id)
    return _delete(db, student, "Student", crud_catalog.student_in_use(db, student_id))


# --- teachers ---

def _teacher(db: Session, teacher_id: int) -> User:
    return _found(crud_catalog.SqlCatalog(db).teacher(teacher_id), "Teacher", teacher_id)


def _check_email_free(db: Session, email: str, user_id: Optional[int] = None):
    existing = crud_user.get_user_by_email(db, email.strip().lower())
    if existing is not None and existing.id != user_id:
        raise errors.ConflictError("Email already registered")


@router.post("/teachers", response_model=UserOut, status_code=201)
def create_teacher(
    teacher_in: TeacherCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    _check_email_free(db, teacher_in.email)
    return _save(
        db, "A teacher with this employee id already exists",
        crud_user.create_user,
        email=teacher_in.email,
        password=teacher_in.password,
        full_name=teacher_in.full_name,
        role="teacher",
        employee_id=teacher_in.employee_id,
    )


@router.get("/teachers", response_model=List[UserOut])
def read_teachers(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return crud_user.get_teachers(db)


@router.get("/teachers/{teacher_id}", response_model=UserOut)
def read_teacher(teacher_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _teacher(db, teacher_id)


@router.put("/teachers/{teacher_id}", response_model=UserOut)
def update_teacher(
    teacher_id: int,
    teacher_in: TeacherUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    teacher = _teacher(db, teacher_id)
    changes = teacher_in.model_dump(exclude_none=True)
    if "email" in changes:
        _check_email_free(db, changes["email"], teacher.id)
    return _save(db, "A teacher with this employee id already exists",
                 crud_user.update_user, teacher, changes)


@router.delete("/teachers/{teacher_id}")
def delete_teacher(teacher_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    teacher = _teacher(db, teacher_id)
    reason = crud_catalog.teacher_in_use(db, teacher_id)
    if reason:
        raise errors.ConflictError(f"Teacher {teacher_id} cannot be deleted: {reason}")
    crud_user.delete_user(db, teacher)
    return {"message": "Teacher deleted"}
