from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from tutorhub.core.choices import GroupType
from tutorhub.schemas.user import UserSummary


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    group_type: GroupType
    product_id: Optional[int] = None
    # ignored for SUPPORT groups
    max_students: Optional[int] = None


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None


class GroupRead(BaseModel):
    id: int
    name: str
    description: Optional[str]
    group_type: GroupType
    max_students: Optional[int]
    is_active: bool
    teacher_id: int
    product_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    # derived at read time
    member_count: int = 0
    assignment_count: int = 0

    class Config:
        from_attributes = True


class MembershipCreate(BaseModel):
    student_id: int


class MemberRead(BaseModel):
    id: int
    group_id: int
    student_id: int
    joined_at: datetime
    student: UserSummary

    class Config:
        from_attributes = True
