"""Submission recorder.

One current submission per (assignment, student). Re-submitting overwrites
the row and puts it back to PENDING, dropping any grade given to the
previous content. Every submit is also appended to the revision log.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tutorhub.core.choices import SubmissionStatus, SubmissionType
from tutorhub.core.errors import AuthorizationError, NotEnrolledError, NotFoundError
from tutorhub.core.timeutils import utcnow
from tutorhub.models.assignment import Assignment
from tutorhub.models.submission import Submission, SubmissionRevision
from tutorhub.models.user import User
from tutorhub.schemas.submission import DocxContent, SubmissionContent, TextContent, UrlContent
from tutorhub.services.assignment_status import is_late
from tutorhub.services.assignments import get_assignment, get_owned_assignment
from tutorhub.services.memberships import is_member
from tutorhub.services.reporting import sort_for_grading

logger = logging.getLogger(__name__)

DOCUMENT_PLACEHOLDER = "Document submitted"


def _stored_fields(content: SubmissionContent) -> tuple[SubmissionType, str, str | None]:
    """Flatten a content variant into (type, content, file_url) columns."""
    if isinstance(content, TextContent):
        return SubmissionType.TEXT, content.content, None
    if isinstance(content, UrlContent):
        return SubmissionType.URL, str(content.content), None
    if isinstance(content, DocxContent):
        text = f"{DOCUMENT_PLACEHOLDER}: {content.file_name}" if content.file_name else DOCUMENT_PLACEHOLDER
        return SubmissionType.DOCX, text, content.file_url
    raise TypeError(f"Unsupported submission content: {type(content).__name__}")


def _find(db: Session, assignment_id: int, student_id: int) -> Submission | None:
    return (
        db.query(Submission)
        .filter(
            Submission.assignment_id == assignment_id,
            Submission.student_id == student_id,
        )
        .first()
    )


def _overwrite(sub: Submission, sub_type: SubmissionType, text: str, file_url: str | None, now: datetime) -> None:
    sub.type = sub_type.value
    sub.content = text
    sub.file_url = file_url
    sub.submitted_at = now

    # clear previous grading on resubmit
    sub.status = SubmissionStatus.PENDING.value
    sub.grade = None
    sub.feedback = None
    sub.graded_at = None


def with_late_flag(sub: Submission, assignment: Assignment | None = None) -> Submission:
    # attach computed field for response
    assignment = assignment or sub.assignment
    sub.is_late = is_late(sub.submitted_at, assignment.due_date)
    return sub


def submit(
    db: Session,
    assignment_id: int,
    student_id: int,
    content: SubmissionContent,
    now: datetime | None = None,
) -> Submission:
    now = now or utcnow()
    assignment = get_assignment(db, assignment_id)
    if not is_member(db, assignment.group_id, student_id):
        raise NotEnrolledError("Not a member of this assignment's group")

    sub_type, text, file_url = _stored_fields(content)

    # allow resubmission: update existing submission if it exists
    existing = _find(db, assignment_id, student_id)
    if existing is None:
        s = Submission(assignment_id=assignment_id, student_id=student_id)
        _overwrite(s, sub_type, text, file_url, now)
        db.add(s)
        try:
            db.flush()
        except IntegrityError:
            # a concurrent submit won the insert; update that row instead
            db.rollback()
            existing = _find(db, assignment_id, student_id)
            if existing is None:
                raise
            _overwrite(existing, sub_type, text, file_url, now)
        else:
            existing = s
    else:
        _overwrite(existing, sub_type, text, file_url, now)

    db.add(
        SubmissionRevision(
            submission=existing,
            type=sub_type.value,
            content=text,
            file_url=file_url,
            submitted_at=now,
        )
    )

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(existing)
    logger.info(
        "student %s submitted %s for assignment %s (submission %s)",
        student_id,
        sub_type.value,
        assignment_id,
        existing.id,
    )
    return with_late_flag(existing, assignment)


def get_submission(db: Session, submission_id: int) -> Submission:
    sub = db.query(Submission).filter(Submission.id == submission_id).first()
    if not sub:
        raise NotFoundError("Submission", submission_id)
    return sub


def get_visible_submission(db: Session, submission_id: int, user: User) -> Submission:
    sub = get_submission(db, submission_id)
    if sub.student_id != user.id and sub.assignment.group.teacher_id != user.id:
        raise AuthorizationError("Not allowed to view this submission")
    return with_late_flag(sub)


def list_for_assignment(db: Session, assignment_id: int, teacher_id: int) -> list[Submission]:
    assignment = get_owned_assignment(db, assignment_id, teacher_id)
    subs = db.query(Submission).filter(Submission.assignment_id == assignment_id).all()
    return [with_late_flag(s, assignment) for s in sort_for_grading(subs)]


def list_for_student(db: Session, student_id: int) -> list[Submission]:
    subs = db.query(Submission).filter(Submission.student_id == student_id).all()
    return [with_late_flag(s) for s in sort_for_grading(subs)]


def history(db: Session, submission_id: int, user: User) -> list[SubmissionRevision]:
    sub = get_visible_submission(db, submission_id, user)
    return list(sub.revisions)
