# classroll/api/presences.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from classroll.api.deps import (
    get_catalog, get_current_user, get_scheduler, get_workflow, require_teacher,
)
from classroll.crud.catalog import SqlCatalog
from classroll.db.models.user import User
from classroll.schemas.catalog import StudentSummary
from classroll.schemas.presence import (
    DecisionRequest, PresenceOut, ScanRequest, ScanResult, SessionRollOut,
)
from classroll.services.enrich import presence_out, session_out
from classroll.services.scheduler import Scheduler
from classroll.services.workflow import PresenceWorkflow, ScanOutcome

router = APIRouter()

SCAN_MESSAGES = {
    ScanOutcome.CREATED: "Presence recorded, awaiting approval",
    ScanOutcome.RESET: "Previously rejected presence is pending again",
    ScanOutcome.ALREADY_PENDING: "Presence already awaiting approval",
    ScanOutcome.ALREADY_APPROVED: "Presence already approved",
}


# Any authenticated device or account may submit scans
@router.post("/scan", response_model=ScanResult)
def scan(
    scan_in: ScanRequest,
    response: Response,
    workflow: PresenceWorkflow = Depends(get_workflow),
    scheduler: Scheduler = Depends(get_scheduler),
    catalog: SqlCatalog = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    outcome, presence = workflow.record_scan(scan_in.tag_id, scan_in.session_id)
    if outcome == ScanOutcome.CREATED:
        response.status_code = status.HTTP_201_CREATED
    session = scheduler.get(presence.session_id)
    return {
        "outcome": outcome.value,
        "message": SCAN_MESSAGES[outcome],
        "data": presence_out(catalog, presence, session),
    }


@router.put("/{presence_id}/decision", response_model=PresenceOut)
def decide(
    presence_id: int,
    decision_in: DecisionRequest,
    workflow: PresenceWorkflow = Depends(get_workflow),
    scheduler: Scheduler = Depends(get_scheduler),
    catalog: SqlCatalog = Depends(get_catalog),
    current_user: User = Depends(require_teacher),
):
    presence = workflow.decide(presence_id, current_user.id, decision_in.decision)
    return presence_out(catalog, presence, scheduler.get(presence.session_id))


@router.get("/session/{session_id}", response_model=SessionRollOut)
def read_session_presences(
    session_id: int,
    workflow: PresenceWorkflow = Depends(get_workflow),
    scheduler: Scheduler = Depends(get_scheduler),
    catalog: SqlCatalog = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    session = scheduler.get(session_id)
    if current_user.role != "admin" and session.teacher_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not allowed to view this session's presences")

    roll = workflow.list_for_session(session_id)
    return {
        "session": session_out(catalog, roll.session),
        "presences": [presence_out(catalog, p, roll.session) for p in roll.presences],
        "absentees": [StudentSummary.model_validate(s) for s in roll.absentees],
        "total_enrolled": roll.total_enrolled,
        "total_approved": roll.total_approved,
    }


@router.get("/teacher/pending", response_model=List[PresenceOut])
def read_pending(
    workflow: PresenceWorkflow = Depends(get_workflow),
    scheduler: Scheduler = Depends(get_scheduler),
    catalog: SqlCatalog = Depends(get_catalog),
    current_user: User = Depends(require_teacher),
):
    pending = workflow.list_pending_for_teacher(current_user.id)
    return [presence_out(catalog, p, scheduler.get(p.session_id)) for p in pending]
