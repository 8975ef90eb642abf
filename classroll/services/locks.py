# classroll/services/locks.py
"""Serialization of schedule writes per (teacher, date) and (room, date).

PostgreSQL gets transaction-scoped advisory locks, released on commit or
rollback. Other engines fall back to a fixed pool of process-local locks,
which only covers a single worker process.
"""
import threading
import zlib
from contextlib import contextmanager
from typing import Iterable

from sqlalchemy import text
from sqlalchemy.orm import Session

_STRIPES = [threading.Lock() for _ in range(64)]


def slot_keys(teacher_id: int, room_id: int, date) -> list:
    day = date.isoformat()
    return [f"teacher:{teacher_id}:{day}", f"room:{room_id}:{day}"]


def _lock_id(key: str) -> int:
    return zlib.crc32(key.encode("utf-8"))


@contextmanager
def schedule_lock(db: Session, keys: Iterable[str]):
    """Hold the locks for ``keys`` until the block exits.

    The block is expected to commit or roll back before leaving, so the
    process-local locks are not released ahead of the transaction.
    """
    ids = sorted({_lock_id(key) for key in keys})

    if db.get_bind().dialect.name == "postgresql":
        for lock_id in ids:
            db.execute(text("SELECT pg_advisory_xact_lock(:lock_id)"), {"lock_id": lock_id})
        yield
        return

    stripes = sorted({lock_id % len(_STRIPES) for lock_id in ids})
    acquired = []
    try:
        for index in stripes:
            _STRIPES[index].acquire()
            acquired.append(_STRIPES[index])
        yield
    finally:
        for lock in reversed(acquired):
            lock.release()
