from fastapi import Depends, HTTPException, status

from tutorhub.core.choices import Role
from tutorhub.core.current_user import get_current_user
from tutorhub.models.user import User


def require_teacher(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.TEACHER.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher role required",
        )
    return current_user


def require_student(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.STUDENT.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student role required",
        )
    return current_user
