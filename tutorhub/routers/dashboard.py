from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tutorhub.core.deps import get_db
from tutorhub.core.permissions import require_teacher
from tutorhub.core.timeutils import utcnow
from tutorhub.models.assignment import Assignment
from tutorhub.models.group import Group
from tutorhub.models.membership import Membership
from tutorhub.models.submission import Submission
from tutorhub.models.user import User
from tutorhub.schemas.dashboard import TeacherDashboard
from tutorhub.services.reporting import teacher_dashboard

router = APIRouter(tags=["dashboard"])


@router.get("/teacher/dashboard", response_model=TeacherDashboard)
def get_teacher_dashboard(
    db: Session = Depends(get_db),
    me: User = Depends(require_teacher),
):
    # load the full collections for this teacher; never a single page
    groups = db.query(Group).filter(Group.teacher_id == me.id).order_by(Group.id.asc()).all()
    group_ids = [g.id for g in groups]

    assignments = db.query(Assignment).filter(Assignment.group_id.in_(group_ids)).all() if group_ids else []
    submissions = (
        db.query(Submission)
        .join(Assignment, Submission.assignment_id == Assignment.id)
        .filter(Assignment.group_id.in_(group_ids))
        .all()
    ) if group_ids else []

    members: dict[int, list[int]] = {gid: [] for gid in group_ids}
    if group_ids:
        rows = (
            db.query(Membership.group_id, Membership.student_id)
            .filter(Membership.group_id.in_(group_ids))
            .all()
        )
        for group_id, student_id in rows:
            members[group_id].append(student_id)

    return teacher_dashboard(groups, assignments, submissions, members, utcnow())
