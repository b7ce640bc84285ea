from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from tutorhub.core.choices import AssignmentStatus
from tutorhub.core.config import DEFAULT_TOTAL_POINTS


class AssignmentCreate(BaseModel):
    group_id: int
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    total_points: int = DEFAULT_TOTAL_POINTS


class AssignmentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    total_points: Optional[int] = None


class AssignmentStats(BaseModel):
    total: int = 0
    graded: int = 0
    pending: int = 0


class AssignmentRead(BaseModel):
    id: int
    group_id: int
    teacher_id: int
    title: str
    description: Optional[str]
    due_date: Optional[datetime]
    total_points: int
    created_at: datetime
    updated_at: datetime

    # computed at read time, never stored
    status: AssignmentStatus
    stats: AssignmentStats

    class Config:
        from_attributes = True
