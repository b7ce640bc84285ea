"""Group membership registry.

LESSON groups are capacity bounded. The bound is enforced by the insert
itself: a single ``INSERT ... SELECT ... WHERE count < max_students``
statement, run while the group row is locked, so two concurrent adds can
never both take the last seat.
"""

import logging

from sqlalchemy import DateTime, Integer, func, insert, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from tutorhub.core.choices import GroupType, Role
from tutorhub.core.errors import (
    AlreadyMemberError,
    CapacityExceededError,
    NotFoundError,
    ValidationError,
)
from tutorhub.core.timeutils import utcnow
from tutorhub.models.group import Group
from tutorhub.models.membership import Membership
from tutorhub.models.user import User
from tutorhub.services.groups import ensure_owner, get_group

logger = logging.getLogger(__name__)


def is_member(db: Session, group_id: int, student_id: int) -> bool:
    return (
        db.query(Membership)
        .filter(Membership.group_id == group_id, Membership.student_id == student_id)
        .first()
        is not None
    )


def _get_membership(db: Session, group_id: int, student_id: int) -> Membership:
    membership = (
        db.query(Membership)
        .filter(Membership.group_id == group_id, Membership.student_id == student_id)
        .first()
    )
    if not membership:
        raise NotFoundError("Membership", f"{group_id}/{student_id}")
    return membership


def _ensure_student(db: Session, student_id: int) -> User:
    student = db.query(User).filter(User.id == student_id).first()
    if not student:
        raise NotFoundError("Student", student_id)
    if student.role != Role.STUDENT.value:
        raise ValidationError("Only students can be group members")
    return student


def _insert_membership(db: Session, group: Group, student_id: int) -> Membership:
    if not group.is_active:
        raise ValidationError("Group is not active")
    if is_member(db, group.id, student_id):
        raise AlreadyMemberError("Student is already a member of this group")

    now = utcnow()
    if group.group_type == GroupType.LESSON.value:
        current = (
            select(func.count(Membership.id))
            .where(Membership.group_id == group.id)
            .scalar_subquery()
        )
        row = select(
            literal(group.id, Integer),
            literal(student_id, Integer),
            literal(now, DateTime(timezone=True)),
        ).where(current < group.max_students)
        stmt = insert(Membership.__table__).from_select(
            ["group_id", "student_id", "joined_at"], row
        )
    else:
        stmt = insert(Membership.__table__).values(
            group_id=group.id, student_id=student_id, joined_at=now
        )

    try:
        result = db.execute(stmt)
    except IntegrityError:
        db.rollback()
        raise AlreadyMemberError("Student is already a member of this group")

    if result.rowcount == 0:
        db.rollback()
        logger.warning(
            "group %s is full (%s students), rejected student %s",
            group.id,
            group.max_students,
            student_id,
        )
        raise CapacityExceededError(group.id, group.max_students)

    db.commit()
    logger.info("student %s joined group %s", student_id, group.id)
    return _get_membership(db, group.id, student_id)


def add_member(db: Session, group_id: int, student_id: int, *, actor_id: int) -> Membership:
    group = get_group(db, group_id, for_update=True)
    ensure_owner(group, actor_id)
    _ensure_student(db, student_id)
    return _insert_membership(db, group, student_id)


def join_group(db: Session, group_id: int, student_id: int) -> Membership:
    """Self-service join. LESSON groups are managed by their teacher."""
    group = get_group(db, group_id, for_update=True)
    if group.group_type != GroupType.SUPPORT.value:
        raise ValidationError("Lesson groups can only be joined through the teacher")
    _ensure_student(db, student_id)
    return _insert_membership(db, group, student_id)


def _delete_membership(db: Session, membership: Membership) -> None:
    # submissions of the student stay for grading history
    group_id, student_id = membership.group_id, membership.student_id
    db.delete(membership)
    db.commit()
    logger.info("student %s left group %s", student_id, group_id)


def remove_member(db: Session, group_id: int, student_id: int, *, actor_id: int) -> None:
    group = get_group(db, group_id)
    ensure_owner(group, actor_id)
    _delete_membership(db, _get_membership(db, group_id, student_id))


def leave_group(db: Session, group_id: int, student_id: int) -> None:
    get_group(db, group_id)
    _delete_membership(db, _get_membership(db, group_id, student_id))


def list_members(db: Session, group_id: int, order: str = "asc") -> list[Membership]:
    get_group(db, group_id)
    if order == "desc":
        order_by = (Membership.joined_at.desc(), Membership.id.desc())
    else:
        order_by = (Membership.joined_at.asc(), Membership.id.asc())
    return (
        db.query(Membership)
        .options(joinedload(Membership.student))
        .filter(Membership.group_id == group_id)
        .order_by(*order_by)
        .all()
    )
