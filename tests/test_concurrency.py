import threading
from datetime import date

from classroll.core.errors import ConflictError
from classroll.crud.catalog import SqlCatalog
from classroll.db.models.class_session import ClassSession
from classroll.services.scheduler import Scheduler
from classroll.services.timeslots import overlaps

DAY = date(2025, 10, 20)


def run_concurrently(session_factory, requests):
    barrier = threading.Barrier(len(requests))
    results = [None] * len(requests)

    def worker(index, fields):
        db = session_factory()
        try:
            barrier.wait()
            results[index] = Scheduler(db, SqlCatalog(db)).create(**fields).id
        except ConflictError as e:
            results[index] = e
        finally:
            db.close()

    threads = [
        threading.Thread(target=worker, args=(i, fields)) for i, fields in enumerate(requests)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results


def test_concurrent_overlapping_creations_for_one_teacher(session_factory, seed, db):
    # same teacher, different rooms and courses, overlapping windows
    rooms = [seed.room1.id, seed.room2.id]
    courses = [seed.course.id, seed.course2.id]
    requests = [
        dict(course_id=courses[i % 2], teacher_id=seed.teacher.id, room_id=rooms[i % 2],
             program_ids=[seed.program1.id], date=DAY,
             start=f"{9 + i % 2}:00", end=f"{11 + i % 2}:00")
        for i in range(6)
    ]

    results = run_concurrently(session_factory, requests)

    created = [r for r in results if isinstance(r, int)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(created) == 1
    assert len(conflicts) == 5

    sessions = db.query(ClassSession).filter(ClassSession.teacher_id == seed.teacher.id).all()
    assert [s.id for s in sessions] == created


def test_concurrent_creations_never_double_book_a_room(session_factory, seed, db):
    teachers = [seed.teacher.id, seed.other.id]
    requests = [
        dict(course_id=seed.course.id if i % 2 else seed.course2.id,
             teacher_id=teachers[i % 2], room_id=seed.room1.id,
             program_ids=[seed.program1.id], date=DAY,
             start=f"{8 + i}:00", end=f"{10 + i}:00")
        for i in range(4)
    ]

    run_concurrently(session_factory, requests)

    sessions = db.query(ClassSession).filter(ClassSession.room_id == seed.room1.id).all()
    assert sessions
    for a in sessions:
        for b in sessions:
            if a.id != b.id:
                assert not overlaps(a.start_minutes, a.end_minutes, b.start_minutes, b.end_minutes)
