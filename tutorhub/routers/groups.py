from typing import Literal, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from tutorhub.core.choices import GroupType
from tutorhub.core.current_user import get_current_user
from tutorhub.core.deps import get_db
from tutorhub.core.errors import AuthorizationError
from tutorhub.core.permissions import require_student, require_teacher
from tutorhub.core.timeutils import utcnow
from tutorhub.models.assignment import Assignment
from tutorhub.models.submission import Submission
from tutorhub.models.user import User
from tutorhub.schemas.dashboard import GroupStats
from tutorhub.schemas.group import GroupCreate, GroupRead, GroupUpdate, MemberRead, MembershipCreate
from tutorhub.services import groups as group_service
from tutorhub.services import memberships as membership_service
from tutorhub.services.reporting import group_stats

router = APIRouter()


def _ensure_can_view_group(db: Session, group, user: User) -> None:
    # inactive groups are visible to their teacher and members only
    if group.teacher_id == user.id or group.is_active:
        return
    if not membership_service.is_member(db, group.id, user.id):
        raise AuthorizationError("Not a member of this group")


@router.post("", response_model=GroupRead, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: GroupCreate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    group = group_service.create_group(
        db,
        teacher.id,
        name=payload.name,
        description=payload.description,
        group_type=payload.group_type,
        product_id=payload.product_id,
        max_students=payload.max_students,
    )
    return group_service.with_counts(db, group)


@router.get("", response_model=list[GroupRead])
def list_groups(
    group_type: Optional[GroupType] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    groups = group_service.list_groups(db, current_user, group_type)
    return [group_service.with_counts(db, g) for g in groups]


@router.get("/{group_id}", response_model=GroupRead)
def get_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    group = group_service.get_group(db, group_id)
    _ensure_can_view_group(db, group, current_user)
    return group_service.with_counts(db, group)


@router.put("/{group_id}", response_model=GroupRead)
def update_group(
    group_id: int,
    payload: GroupUpdate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    group = group_service.update_group(
        db, teacher.id, group_id, payload.model_dump(exclude_unset=True)
    )
    return group_service.with_counts(db, group)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(
    group_id: int,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    group_service.delete_group(db, teacher.id, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{group_id}/stats", response_model=GroupStats)
def get_group_stats(
    group_id: int,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    group = group_service.get_owned_group(db, group_id, teacher.id)
    assignments = db.query(Assignment).filter(Assignment.group_id == group.id).all()
    submissions = (
        db.query(Submission)
        .join(Assignment, Submission.assignment_id == Assignment.id)
        .filter(Assignment.group_id == group.id)
        .all()
    )
    return group_stats(
        group,
        assignments,
        submissions,
        group_service.member_count(db, group.id),
        utcnow(),
    )


# ==================== MEMBERS ====================


@router.get("/{group_id}/members", response_model=list[MemberRead])
def list_members(
    group_id: int,
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    group = group_service.get_group(db, group_id)
    if not membership_service.is_member(db, group_id, current_user.id):
        group_service.ensure_owner(group, current_user.id)
    return membership_service.list_members(db, group_id, order)


@router.post(
    "/{group_id}/members",
    response_model=MemberRead,
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    group_id: int,
    payload: MembershipCreate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    return membership_service.add_member(db, group_id, payload.student_id, actor_id=teacher.id)


@router.delete("/{group_id}/members/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    group_id: int,
    student_id: int,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    membership_service.remove_member(db, group_id, student_id, actor_id=teacher.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{group_id}/join", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
def join_group(
    group_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return membership_service.join_group(db, group_id, me.id)


@router.post("/{group_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
def leave_group(
    group_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    membership_service.leave_group(db, group_id, me.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
