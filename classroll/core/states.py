# classroll/core/states.py
import enum


class SessionStatus(str, enum.Enum):
    PLANNED = "planned"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Same-status updates are always accepted and are not listed here.
SESSION_TRANSITIONS = {
    SessionStatus.PLANNED: {SessionStatus.CONFIRMED, SessionStatus.COMPLETED, SessionStatus.CANCELLED},
    SessionStatus.CONFIRMED: {SessionStatus.PLANNED, SessionStatus.COMPLETED, SessionStatus.CANCELLED},
    SessionStatus.COMPLETED: {SessionStatus.CANCELLED},
    SessionStatus.CANCELLED: set(),
}

# Sessions in these states are closed: no scans, no schedule edits.
CLOSED_SESSION_STATUSES = {SessionStatus.COMPLETED, SessionStatus.CANCELLED}
ACTIVE_SESSION_STATUSES = {SessionStatus.PLANNED, SessionStatus.CONFIRMED}

# Teacher decisions
DECISION_TRANSITIONS = {
    ApprovalStatus.PENDING: {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED},
    ApprovalStatus.APPROVED: set(),
    ApprovalStatus.REJECTED: set(),
}

# Scanner-driven transitions on an existing record
SCAN_TRANSITIONS = {
    ApprovalStatus.PENDING: set(),
    ApprovalStatus.APPROVED: set(),
    ApprovalStatus.REJECTED: {ApprovalStatus.PENDING},
}


def can_move_session(current: SessionStatus, target: SessionStatus) -> bool:
    return current == target or target in SESSION_TRANSITIONS[current]


def can_decide(current: ApprovalStatus, decision: ApprovalStatus) -> bool:
    return decision in DECISION_TRANSITIONS[current]


def scan_resets(current: ApprovalStatus) -> bool:
    return ApprovalStatus.PENDING in SCAN_TRANSITIONS[current]
