import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from tutorhub.core.choices import GroupType, Role
from tutorhub.core.config import DEFAULT_MAX_STUDENTS, MAX_STUDENTS_LIMIT
from tutorhub.core.errors import AuthorizationError, GroupNotEmptyError, NotFoundError, ValidationError
from tutorhub.models.assignment import Assignment
from tutorhub.models.group import Group
from tutorhub.models.membership import Membership
from tutorhub.models.user import User

logger = logging.getLogger(__name__)


def get_group(db: Session, group_id: int, *, for_update: bool = False) -> Group:
    query = db.query(Group).filter(Group.id == group_id)
    if for_update:
        query = query.with_for_update()
    group = query.first()
    if not group:
        raise NotFoundError("Group", group_id)
    return group


def ensure_owner(group: Group, teacher_id: int) -> None:
    if group.teacher_id != teacher_id:
        raise AuthorizationError("Only the group's teacher can do this")


def get_owned_group(db: Session, group_id: int, teacher_id: int) -> Group:
    group = get_group(db, group_id)
    ensure_owner(group, teacher_id)
    return group


def member_count(db: Session, group_id: int) -> int:
    return (
        db.query(func.count(Membership.id))
        .filter(Membership.group_id == group_id)
        .scalar()
    ) or 0


def assignment_count(db: Session, group_id: int) -> int:
    return (
        db.query(func.count(Assignment.id))
        .filter(Assignment.group_id == group_id)
        .scalar()
    ) or 0


def with_counts(db: Session, group: Group) -> Group:
    # attach derived counts for the response model
    group.member_count = member_count(db, group.id)
    group.assignment_count = assignment_count(db, group.id)
    return group


def create_group(
    db: Session,
    teacher_id: int,
    *,
    name: str,
    description: str | None,
    group_type: GroupType,
    product_id: int | None = None,
    max_students: int | None = None,
) -> Group:
    if group_type == GroupType.LESSON:
        if max_students is None:
            max_students = DEFAULT_MAX_STUDENTS
        if not 1 <= max_students <= MAX_STUDENTS_LIMIT:
            raise ValidationError(
                f"max_students must be between 1 and {MAX_STUDENTS_LIMIT}"
            )
    else:
        max_students = None

    group = Group(
        name=name,
        description=description,
        group_type=group_type.value,
        max_students=max_students,
        is_active=True,
        teacher_id=teacher_id,
        product_id=product_id,
    )
    db.add(group)
    db.commit()
    db.refresh(group)
    logger.info("teacher %s created %s group %s", teacher_id, group.group_type, group.id)
    return group


def list_groups(db: Session, user: User, group_type: GroupType | None = None) -> list[Group]:
    query = db.query(Group)
    if user.role == Role.TEACHER.value:
        query = query.filter(Group.teacher_id == user.id)
    else:
        query = query.filter(Group.is_active.is_(True))
    if group_type is not None:
        query = query.filter(Group.group_type == group_type.value)
    return query.order_by(Group.created_at.desc(), Group.id.desc()).all()


def update_group(db: Session, teacher_id: int, group_id: int, changes: dict) -> Group:
    group = get_owned_group(db, group_id, teacher_id)
    for field in ("name", "description", "is_active"):
        if field in changes and changes[field] is not None:
            setattr(group, field, changes[field])
    db.commit()
    db.refresh(group)
    return group


def delete_group(db: Session, teacher_id: int, group_id: int) -> None:
    """Deletion is blocked while the group still has members or assignments."""
    group = get_owned_group(db, group_id, teacher_id)
    if member_count(db, group.id) or assignment_count(db, group.id):
        raise GroupNotEmptyError(
            "Remove all members and assignments before deleting the group"
        )
    db.delete(group)
    db.commit()
    logger.info("teacher %s deleted group %s", teacher_id, group_id)
