"""Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; ``tutorhub.main`` registers a
single handler that renders them as ``{"detail": ..., "error": ...}``.
"""

from fastapi import status


class TutorHubError(Exception):
    """Base class for all user-facing domain failures."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class ValidationError(TutorHubError):
    """Malformed or out-of-range input (points ceiling, past due date, ...)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(TutorHubError):
    """A referenced group, assignment, submission or user does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class InvalidGroupTypeError(TutorHubError):
    """Assignments may only target LESSON groups."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotEnrolledError(TutorHubError):
    """The student is not a member of the assignment's group."""

    status_code = status.HTTP_403_FORBIDDEN


class CapacityExceededError(TutorHubError):
    """A LESSON group already holds ``max_students`` members."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, group_id: int, max_students: int):
        self.group_id = group_id
        self.max_students = max_students
        super().__init__(
            f"Group is full. Maximum {max_students} students allowed."
        )


class AlreadyMemberError(TutorHubError):
    status_code = status.HTTP_409_CONFLICT


class GroupNotEmptyError(TutorHubError):
    """Groups with members or assignments cannot be deleted."""

    status_code = status.HTTP_409_CONFLICT


class OutOfRangeError(TutorHubError):
    """A grade outside ``[0, total_points]``."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(TutorHubError):
    """The actor is not the owning teacher (or not the submitting student)."""

    status_code = status.HTTP_403_FORBIDDEN
