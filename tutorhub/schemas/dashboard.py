from pydantic import BaseModel

from tutorhub.core.choices import GroupType


class GroupStats(BaseModel):
    group_id: int
    group_name: str
    group_type: GroupType
    member_count: int
    total_assignments: int
    active_assignments: int
    due_soon_assignments: int
    overdue_assignments: int
    no_deadline_assignments: int
    total_submissions: int
    graded_submissions: int
    pending_submissions: int


class TeacherDashboard(BaseModel):
    total_groups: int
    total_students: int
    total_assignments: int
    active_assignments: int
    due_soon_assignments: int
    overdue_assignments: int
    no_deadline_assignments: int
    submissions_received: int
    graded_submissions: int
    pending_submissions: int
    groups: list[GroupStats]
