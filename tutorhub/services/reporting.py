"""Read-side aggregation for dashboards.

Everything here is a pure function over collections the caller loaded for
the current request. Nothing is cached and nothing is written back, so the
numbers always match the rows they were computed from.
"""

from collections import Counter, defaultdict
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from tutorhub.core.choices import AssignmentStatus, SubmissionStatus
from tutorhub.core.timeutils import as_utc
from tutorhub.schemas.assignment import AssignmentStats
from tutorhub.schemas.dashboard import GroupStats, TeacherDashboard
from tutorhub.services.assignment_status import derive_status


def sort_for_grading(submissions: Iterable) -> list:
    """Most recent ``submitted_at`` first; identical timestamps by id, newest first."""
    return sorted(
        submissions,
        key=lambda s: (as_utc(s.submitted_at), s.id),
        reverse=True,
    )


def assignment_stats(submissions: Iterable) -> AssignmentStats:
    total = 0
    graded = 0
    for s in submissions:
        total += 1
        if s.status == SubmissionStatus.GRADED.value:
            graded += 1
    return AssignmentStats(total=total, graded=graded, pending=total - graded)


def submissions_by_assignment(submissions: Iterable) -> dict[int, list]:
    grouped: dict[int, list] = defaultdict(list)
    for s in submissions:
        grouped[s.assignment_id].append(s)
    return grouped


def status_counts(assignments: Iterable, now: datetime) -> Counter:
    return Counter(derive_status(a.due_date, now) for a in assignments)


def group_stats(
    group,
    assignments: Sequence,
    submissions: Sequence,
    member_count: int,
    now: datetime,
) -> GroupStats:
    """Roll per-assignment counts up to one group.

    Only assignments and submissions belonging to ``group`` are counted, so
    callers may pass the teacher's full collections.
    """
    own_assignments = [a for a in assignments if a.group_id == group.id]
    own_ids = {a.id for a in own_assignments}
    stats = assignment_stats(s for s in submissions if s.assignment_id in own_ids)
    counts = status_counts(own_assignments, now)

    return GroupStats(
        group_id=group.id,
        group_name=group.name,
        group_type=group.group_type,
        member_count=member_count,
        total_assignments=len(own_assignments),
        active_assignments=counts[AssignmentStatus.ACTIVE],
        due_soon_assignments=counts[AssignmentStatus.DUE_SOON],
        overdue_assignments=counts[AssignmentStatus.OVERDUE],
        no_deadline_assignments=counts[AssignmentStatus.NO_DEADLINE],
        total_submissions=stats.total,
        graded_submissions=stats.graded,
        pending_submissions=stats.pending,
    )


def teacher_dashboard(
    groups: Sequence,
    assignments: Sequence,
    submissions: Sequence,
    members: Mapping[int, Sequence[int]],
    now: datetime,
) -> TeacherDashboard:
    """Dashboard for one teacher.

    ``members`` maps group id to the student ids enrolled in it; a student in
    several groups is counted once in ``total_students``.
    """
    rows = [
        group_stats(g, assignments, submissions, len(members.get(g.id, ())), now)
        for g in groups
    ]
    group_ids = {g.id for g in groups}
    own_assignments = [a for a in assignments if a.group_id in group_ids]
    own_ids = {a.id for a in own_assignments}
    stats = assignment_stats(s for s in submissions if s.assignment_id in own_ids)
    counts = status_counts(own_assignments, now)
    students = {sid for gid in group_ids for sid in members.get(gid, ())}

    return TeacherDashboard(
        total_groups=len(rows),
        total_students=len(students),
        total_assignments=len(own_assignments),
        active_assignments=counts[AssignmentStatus.ACTIVE],
        due_soon_assignments=counts[AssignmentStatus.DUE_SOON],
        overdue_assignments=counts[AssignmentStatus.OVERDUE],
        no_deadline_assignments=counts[AssignmentStatus.NO_DEADLINE],
        submissions_received=stats.total,
        graded_submissions=stats.graded,
        pending_submissions=stats.pending,
        groups=rows,
    )
