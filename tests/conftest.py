from datetime import date
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from classroll.api.deps import get_db, get_hub, get_publisher, get_session_factory
from classroll.core.security import create_access_token
from classroll.crud import catalog as crud_catalog
from classroll.crud import user as crud_user
from classroll.crud.catalog import SqlCatalog
from classroll.db.init_db import create_tables
from classroll.db.session import make_engine
from classroll.main import app
from classroll.schemas.catalog import StudentCreate
from classroll.services.notifications import SessionHub
from classroll.services.scheduler import Scheduler
from classroll.services.workflow import PresenceWorkflow

DAY = date(2025, 10, 20)


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, session_id, event_kind, payload):
        self.events.append((session_id, event_kind, payload))

    def kinds(self):
        return [kind for _, kind, _ in self.events]


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def seed(db):
    """Two teachers, two rooms, two programs, one course, three students."""
    admin = crud_user.create_user(db, "admin@school.local", "adminpass", "Admin", "admin")
    teacher = crud_user.create_user(db, "t@school.local", "teachpass", "Teacher T", "teacher", "EMP-1")
    other = crud_user.create_user(db, "u@school.local", "teachpass", "Teacher U", "teacher", "EMP-2")
    room1 = crud_catalog.create_room(db, "R1")
    room2 = crud_catalog.create_room(db, "R2")
    program1 = crud_catalog.create_program(db, "Computer Engineering")
    program2 = crud_catalog.create_program(db, "Civil Engineering")
    course = crud_catalog.create_course(db, "Java part 1")
    course2 = crud_catalog.create_course(db, "Image processing")

    def student(matricule, name, tag, program):
        return crud_catalog.create_student(db, StudentCreate(
            matricule=matricule, full_name=name, tag_id=tag, program_id=program.id,
        ))

    x = student("M-001", "Xavier Alami", "TAG-X", program1)
    y = student("M-002", "Yasmine Bennani", "TAG-Y", program1)
    z = student("M-003", "Zineb Chraibi", "TAG-Z", program2)

    return SimpleNamespace(
        admin=admin, teacher=teacher, other=other,
        room1=room1, room2=room2,
        program1=program1, program2=program2,
        course=course, course2=course2,
        x=x, y=y, z=z,
    )


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def scheduler(db):
    return Scheduler(db, SqlCatalog(db))


@pytest.fixture
def workflow(db, publisher):
    return PresenceWorkflow(db, SqlCatalog(db), publisher)


@pytest.fixture
def planned(scheduler, seed):
    """Session A: teacher T, room R1, program 1, 09:00-11:00."""
    return scheduler.create(
        course_id=seed.course.id,
        teacher_id=seed.teacher.id,
        room_id=seed.room1.id,
        program_ids=[seed.program1.id],
        date=DAY,
        start="09:00",
        end="11:00",
    )


@pytest.fixture
def hub():
    return SessionHub()


@pytest.fixture
def client(session_factory, publisher, hub):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_publisher] = lambda: publisher
    app.dependency_overrides[get_hub] = lambda: hub
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


def token_for(user):
    return create_access_token(data={"sub": user.email, "role": user.role})


def auth(user):
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture
def headers():
    return auth


@pytest.fixture
def token():
    return token_for
