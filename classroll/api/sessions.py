# classroll/api/sessions.py
from datetime import date as date_type
from typing import List, Optional

from fastapi import APIRouter, Depends

from classroll.api.deps import get_catalog, get_current_user, get_scheduler, require_admin
from classroll.core.states import SessionStatus
from classroll.crud.catalog import SqlCatalog
from classroll.db.models.user import User
from classroll.schemas.class_session import (
    ClassSessionCreate, ClassSessionOut, ClassSessionUpdate, SessionRemovalOut,
)
from classroll.services.enrich import session_out
from classroll.services.scheduler import RemovalOutcome, Scheduler

router = APIRouter()

REMOVAL_MESSAGES = {
    RemovalOutcome.DELETED: "Session deleted (no presence recorded)",
    RemovalOutcome.CANCELLED: "Session cancelled because presence records exist",
    RemovalOutcome.ALREADY_CANCELLED: "Session is already cancelled",
}


@router.post("", response_model=ClassSessionOut, status_code=201)
def create_session(
    session_in: ClassSessionCreate,
    scheduler: Scheduler = Depends(get_scheduler),
    catalog: SqlCatalog = Depends(get_catalog),
    current_user: User = Depends(require_admin),
):
    session = scheduler.create(
        course_id=session_in.course_id,
        teacher_id=session_in.teacher_id,
        room_id=session_in.room_id,
        program_ids=session_in.program_ids,
        date=session_in.date,
        start=session_in.start,
        end=session_in.end,
    )
    return session_out(catalog, session)


# Sorted by date then start time
@router.get("", response_model=List[ClassSessionOut])
def read_sessions(
    date: Optional[date_type] = None,
    teacher_id: Optional[int] = None,
    room_id: Optional[int] = None,
    status: Optional[SessionStatus] = None,
    scheduler: Scheduler = Depends(get_scheduler),
    catalog: SqlCatalog = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    sessions = scheduler.list_sessions(
        date=date, teacher_id=teacher_id, room_id=room_id, status=status
    )
    return [session_out(catalog, s) for s in sessions]


@router.get("/{session_id}", response_model=ClassSessionOut)
def read_session(
    session_id: int,
    scheduler: Scheduler = Depends(get_scheduler),
    catalog: SqlCatalog = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    return session_out(catalog, scheduler.get(session_id))


@router.put("/{session_id}", response_model=ClassSessionOut)
def update_session(
    session_id: int,
    changes: ClassSessionUpdate,
    scheduler: Scheduler = Depends(get_scheduler),
    catalog: SqlCatalog = Depends(get_catalog),
    current_user: User = Depends(require_admin),
):
    session = scheduler.update(session_id, changes.model_dump(exclude_unset=True))
    return session_out(catalog, session)


@router.delete("/{session_id}", response_model=SessionRemovalOut)
def delete_session(
    session_id: int,
    scheduler: Scheduler = Depends(get_scheduler),
    catalog: SqlCatalog = Depends(get_catalog),
    current_user: User = Depends(require_admin),
):
    outcome, session = scheduler.cancel_or_remove(session_id)
    return {
        "outcome": outcome.value,
        "message": REMOVAL_MESSAGES[outcome],
        "data": session_out(catalog, session) if session is not None else None,
    }
