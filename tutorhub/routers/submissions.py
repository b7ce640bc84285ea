from typing import Annotated, Union

from fastapi import APIRouter, Body, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from tutorhub.core.config import MAX_UPLOAD_BYTES
from tutorhub.core.current_user import get_current_user
from tutorhub.core.deps import get_db, get_file_storage
from tutorhub.core.errors import NotEnrolledError
from tutorhub.core.permissions import require_student, require_teacher
from tutorhub.models.user import User
from tutorhub.schemas.submission import (
    DocxContent,
    SubmissionGrade,
    SubmissionRead,
    SubmissionRevisionRead,
    TextContent,
    UrlContent,
)
from tutorhub.services import submissions as submission_service
from tutorhub.services.assignments import get_assignment
from tutorhub.services.grading import grade_submission
from tutorhub.services.memberships import is_member
from tutorhub.services.storage import FileStorage, validate_upload

router = APIRouter()


@router.post(
    "/assignments/{assignment_id}/submissions",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_assignment(
    assignment_id: int,
    payload: Annotated[
        Union[TextContent, UrlContent, DocxContent],
        Body(discriminator="type"),
    ],
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return submission_service.submit(db, assignment_id, me.id, payload)


@router.post(
    "/assignments/{assignment_id}/submissions/upload",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
)
def upload_submission(
    assignment_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
    storage: FileStorage = Depends(get_file_storage),
):
    # check membership before anything is written to storage
    assignment = get_assignment(db, assignment_id)
    if not is_member(db, assignment.group_id, me.id):
        raise NotEnrolledError("Not a member of this assignment's group")

    # one byte past the limit is enough to detect an oversized upload
    data = file.file.read(MAX_UPLOAD_BYTES + 1)
    validate_upload(file.filename, len(data))
    file_url = storage.save(file.filename, data)

    content = DocxContent(file_url=file_url, file_name=file.filename)
    try:
        return submission_service.submit(db, assignment_id, me.id, content)
    except Exception:
        storage.delete(file_url)
        raise


@router.get(
    "/assignments/{assignment_id}/submissions",
    response_model=list[SubmissionRead],
)
def list_submissions_for_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    return submission_service.list_for_assignment(db, assignment_id, teacher.id)


@router.get("/submissions/me", response_model=list[SubmissionRead])
def my_submissions(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return submission_service.list_for_student(db, me.id)


@router.get("/submissions/{submission_id}", response_model=SubmissionRead)
def get_submission(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return submission_service.get_visible_submission(db, submission_id, current_user)


@router.get(
    "/submissions/{submission_id}/history",
    response_model=list[SubmissionRevisionRead],
)
def submission_history(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return submission_service.history(db, submission_id, current_user)


@router.post("/submissions/{submission_id}/grade", response_model=SubmissionRead)
def grade(
    submission_id: int,
    payload: SubmissionGrade,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    return grade_submission(db, submission_id, teacher.id, payload.grade, payload.feedback)
