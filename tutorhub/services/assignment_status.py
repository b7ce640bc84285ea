from datetime import datetime

from tutorhub.core.choices import AssignmentStatus
from tutorhub.core.config import DUE_SOON_WINDOW
from tutorhub.core.timeutils import as_utc, utcnow


def derive_status(due_date: datetime | None, now: datetime | None = None) -> AssignmentStatus:
    """
    Status of an assignment at ``now``. Never stored, so assignments age
    with the clock:
    - no due date -> NO_DEADLINE
    - due date passed -> OVERDUE
    - due within DUE_SOON_WINDOW (3 days) -> DUE_SOON
    - otherwise -> ACTIVE
    """
    if due_date is None:
        return AssignmentStatus.NO_DEADLINE

    now = as_utc(now) if now is not None else utcnow()
    due = as_utc(due_date)

    if due < now:
        return AssignmentStatus.OVERDUE
    if due - now <= DUE_SOON_WINDOW:
        return AssignmentStatus.DUE_SOON
    return AssignmentStatus.ACTIVE


def is_late(submitted_at: datetime, due_date: datetime | None) -> bool:
    if due_date is None or submitted_at is None:
        return False
    return as_utc(submitted_at) > as_utc(due_date)
