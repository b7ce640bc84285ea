import enum


class Role(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    PARENT = "parent"


class GroupType(str, enum.Enum):
    LESSON = "LESSON"
    SUPPORT = "SUPPORT"


class SubmissionType(str, enum.Enum):
    TEXT = "TEXT"
    URL = "URL"
    DOCX = "DOCX"


class SubmissionStatus(str, enum.Enum):
    PENDING = "PENDING"
    GRADED = "GRADED"


class AssignmentStatus(str, enum.Enum):
    NO_DEADLINE = "NO_DEADLINE"
    OVERDUE = "OVERDUE"
    DUE_SOON = "DUE_SOON"
    ACTIVE = "ACTIVE"
