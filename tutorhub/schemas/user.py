from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    full_name: str | None = None
    role: Literal["student", "teacher", "parent"] = "student"


class UserRead(BaseModel):
    id: int
    email: str
    full_name: str | None = None
    role: str
    created_at: datetime

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    id: int
    email: str
    full_name: str | None = None

    class Config:
        from_attributes = True
