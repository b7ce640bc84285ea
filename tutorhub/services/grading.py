import logging
from datetime import datetime

from sqlalchemy.orm import Session

from tutorhub.core.choices import SubmissionStatus
from tutorhub.core.config import FEEDBACK_MAX_LENGTH
from tutorhub.core.errors import AuthorizationError, OutOfRangeError, ValidationError
from tutorhub.core.timeutils import utcnow
from tutorhub.models.submission import Submission
from tutorhub.services.submissions import get_submission, with_late_flag

logger = logging.getLogger(__name__)


def grade_submission(
    db: Session,
    submission_id: int,
    grader_id: int,
    grade: float,
    feedback: str | None = None,
    now: datetime | None = None,
) -> Submission:
    """
    Grade (or re-grade) a submission.

    PENDING -> GRADED on first grading; grading a GRADED submission again
    overwrites grade, feedback and graded_at.
    """
    sub = get_submission(db, submission_id)
    assignment = sub.assignment

    if assignment.group.teacher_id != grader_id:
        raise AuthorizationError("Only the group's teacher can grade")

    # NaN fails every comparison, so test the range positively
    if not 0 <= grade <= assignment.total_points:
        raise OutOfRangeError(f"grade must be between 0 and {assignment.total_points}")

    if feedback is not None and len(feedback) > FEEDBACK_MAX_LENGTH:
        raise ValidationError(f"feedback must be at most {FEEDBACK_MAX_LENGTH} characters")

    sub.grade = grade
    sub.feedback = feedback or None
    sub.status = SubmissionStatus.GRADED.value
    sub.graded_at = now or utcnow()

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(sub)
    logger.info("teacher %s graded submission %s: %s/%s", grader_id, sub.id, grade, assignment.total_points)
    return with_late_flag(sub, assignment)
