import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from tutorhub.core.choices import GroupType, Role
from tutorhub.core.config import MAX_TOTAL_POINTS, MIN_TOTAL_POINTS
from tutorhub.core.errors import (
    AuthorizationError,
    InvalidGroupTypeError,
    NotFoundError,
    ValidationError,
)
from tutorhub.core.timeutils import as_utc, utcnow
from tutorhub.models.assignment import Assignment
from tutorhub.models.group import Group
from tutorhub.models.membership import Membership
from tutorhub.models.submission import Submission
from tutorhub.models.user import User
from tutorhub.services.groups import ensure_owner, get_group
from tutorhub.services.memberships import is_member
from tutorhub.services.notifications import Notifier, dispatch

logger = logging.getLogger(__name__)


def _validate_total_points(total_points: int) -> None:
    if not MIN_TOTAL_POINTS <= total_points <= MAX_TOTAL_POINTS:
        raise ValidationError(
            f"total_points must be between {MIN_TOTAL_POINTS} and {MAX_TOTAL_POINTS}"
        )


def _validate_due_date(due_date: datetime, now: datetime) -> datetime:
    due = as_utc(due_date)
    if due <= now:
        raise ValidationError("due_date must be in the future")
    return due


def _validate_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("title must not be empty")
    return title


def _assignment_order_by():
    """
    Assignment ordering:
    - due_date NULLs last (SQLite-safe)
    - due_date ascending
    - assignment id ascending (stable tie-break)
    """
    return (
        Assignment.due_date.is_(None),
        Assignment.due_date.asc(),
        Assignment.id.asc(),
    )


def get_assignment(db: Session, assignment_id: int) -> Assignment:
    a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not a:
        raise NotFoundError("Assignment", assignment_id)
    return a


def get_owned_assignment(db: Session, assignment_id: int, teacher_id: int) -> Assignment:
    a = get_assignment(db, assignment_id)
    if a.group.teacher_id != teacher_id:
        raise AuthorizationError("Only the group's teacher can manage this assignment")
    return a


def ensure_can_view(db: Session, assignment: Assignment, user: User) -> None:
    # teacher of the group can view
    if assignment.group.teacher_id == user.id:
        return
    # member student can view
    if is_member(db, assignment.group_id, user.id):
        return
    raise AuthorizationError("Not a member of this assignment's group")


def create_assignment(
    db: Session,
    teacher_id: int,
    *,
    group_id: int,
    title: str,
    description: str | None,
    due_date: datetime | None,
    total_points: int,
    notifier: Notifier,
    now: datetime | None = None,
) -> Assignment:
    now = now or utcnow()
    group = get_group(db, group_id)

    # checked before ownership: SUPPORT groups never host assignments
    if group.group_type != GroupType.LESSON.value:
        raise InvalidGroupTypeError("Assignments can only be created in lesson groups")
    ensure_owner(group, teacher_id)

    title = _validate_title(title)
    _validate_total_points(total_points)
    if due_date is not None:
        due_date = _validate_due_date(due_date, now)

    a = Assignment(
        group_id=group.id,
        teacher_id=teacher_id,
        title=title,
        description=description,
        due_date=due_date,
        total_points=total_points,
    )
    db.add(a)
    db.commit()
    db.refresh(a)
    logger.info("teacher %s created assignment %s in group %s", teacher_id, a.id, group.id)

    dispatch(notifier, group.id, f"New assignment: {a.title}")
    return a


def list_assignments(
    db: Session,
    user: User,
    group_id: int | None = None,
    page: int = 1,
    limit: int = 20,
) -> list[Assignment]:
    query = db.query(Assignment).join(Group, Group.id == Assignment.group_id)

    if user.role == Role.TEACHER.value:
        query = query.filter(Group.teacher_id == user.id)
    else:
        query = query.join(
            Membership,
            (Membership.group_id == Assignment.group_id) & (Membership.student_id == user.id),
        )

    if group_id is not None:
        group = get_group(db, group_id)
        if group.teacher_id != user.id and not is_member(db, group_id, user.id):
            raise AuthorizationError("Not a member of this group")
        query = query.filter(Assignment.group_id == group_id)

    return (
        query.order_by(*_assignment_order_by())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )


def update_assignment(
    db: Session,
    teacher_id: int,
    assignment_id: int,
    changes: dict,
    now: datetime | None = None,
) -> Assignment:
    now = now or utcnow()
    a = get_owned_assignment(db, assignment_id, teacher_id)

    if changes.get("title") is not None:
        a.title = _validate_title(changes["title"])
    if "description" in changes:
        a.description = changes["description"]
    if "due_date" in changes:
        # an explicit null removes the deadline
        due_date = changes["due_date"]
        a.due_date = None if due_date is None else _validate_due_date(due_date, now)
    if changes.get("total_points") is not None:
        total_points = changes["total_points"]
        _validate_total_points(total_points)
        highest = (
            db.query(func.max(Submission.grade))
            .filter(Submission.assignment_id == a.id)
            .scalar()
        )
        if highest is not None and highest > total_points:
            raise ValidationError(
                f"total_points cannot be lower than an existing grade ({highest:g})"
            )
        a.total_points = total_points

    db.commit()
    db.refresh(a)
    return a


def delete_assignment(db: Session, teacher_id: int, assignment_id: int) -> None:
    """Deleting an assignment removes its submissions and their revisions."""
    a = get_owned_assignment(db, assignment_id, teacher_id)
    db.delete(a)
    db.commit()
    logger.info("teacher %s deleted assignment %s", teacher_id, assignment_id)
