from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from tutorhub.core.current_user import get_current_user
from tutorhub.core.deps import get_db, get_notifier
from tutorhub.core.permissions import require_teacher
from tutorhub.core.timeutils import utcnow
from tutorhub.models.assignment import Assignment
from tutorhub.models.submission import Submission
from tutorhub.models.user import User
from tutorhub.schemas.assignment import AssignmentCreate, AssignmentRead, AssignmentUpdate
from tutorhub.services import assignments as assignment_service
from tutorhub.services.assignment_status import derive_status
from tutorhub.services.notifications import Notifier
from tutorhub.services.reporting import assignment_stats, submissions_by_assignment

router = APIRouter()


def _with_derived_fields(db: Session, assignments: list[Assignment]) -> list[Assignment]:
    # attach status + submission stats, recomputed on every read
    now = utcnow()
    ids = [a.id for a in assignments]
    subs = db.query(Submission).filter(Submission.assignment_id.in_(ids)).all() if ids else []
    by_assignment = submissions_by_assignment(subs)
    for a in assignments:
        a.status = derive_status(a.due_date, now)
        a.stats = assignment_stats(by_assignment.get(a.id, []))
    return assignments


@router.post("", response_model=AssignmentRead, status_code=status.HTTP_201_CREATED)
def create_assignment(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
    notifier: Notifier = Depends(get_notifier),
):
    a = assignment_service.create_assignment(
        db,
        teacher.id,
        group_id=payload.group_id,
        title=payload.title,
        description=payload.description,
        due_date=payload.due_date,
        total_points=payload.total_points,
        notifier=notifier,
    )
    return _with_derived_fields(db, [a])[0]


@router.get("", response_model=list[AssignmentRead])
def list_assignments(
    group_id: Optional[int] = Query(default=None, alias="groupId"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    assignments = assignment_service.list_assignments(
        db, current_user, group_id=group_id, page=page, limit=limit
    )
    return _with_derived_fields(db, assignments)


@router.get("/{assignment_id}", response_model=AssignmentRead)
def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    a = assignment_service.get_assignment(db, assignment_id)
    assignment_service.ensure_can_view(db, a, current_user)
    return _with_derived_fields(db, [a])[0]


@router.put("/{assignment_id}", response_model=AssignmentRead)
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    a = assignment_service.update_assignment(
        db, teacher.id, assignment_id, payload.model_dump(exclude_unset=True)
    )
    return _with_derived_fields(db, [a])[0]


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    assignment_service.delete_assignment(db, teacher.id, assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
