from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import AnyHttpUrl, BaseModel, Field

from tutorhub.core.choices import SubmissionStatus, SubmissionType


class TextContent(BaseModel):
    type: Literal["TEXT"] = "TEXT"
    content: str = Field(min_length=1)


class UrlContent(BaseModel):
    type: Literal["URL"] = "URL"
    content: AnyHttpUrl


class DocxContent(BaseModel):
    type: Literal["DOCX"] = "DOCX"
    file_url: str = Field(min_length=1)
    file_name: Optional[str] = None


SubmissionContent = Annotated[
    Union[TextContent, UrlContent, DocxContent],
    Field(discriminator="type"),
]


class SubmissionRead(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    type: SubmissionType
    content: str
    file_url: Optional[str] = None
    status: SubmissionStatus
    submitted_at: datetime
    grade: Optional[float] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None

    # computed from submitted_at vs the assignment due date
    is_late: bool = False

    class Config:
        from_attributes = True


class SubmissionRevisionRead(BaseModel):
    id: int
    submission_id: int
    type: SubmissionType
    content: str
    file_url: Optional[str] = None
    submitted_at: datetime

    class Config:
        from_attributes = True


class SubmissionGrade(BaseModel):
    grade: float = Field(allow_inf_nan=False)
    feedback: Optional[str] = None
