from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from tutorhub.db.base_class import Base


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)

    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String(10), nullable=False)
    content = Column(Text, nullable=False)
    file_url = Column(String(1024), nullable=True)

    status = Column(String(10), nullable=False, default="PENDING")
    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Grading fields (nullable until graded)
    grade = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", back_populates="submissions")

    revisions = relationship(
        "SubmissionRevision",
        back_populates="submission",
        cascade="all, delete-orphan",
        order_by="SubmissionRevision.id.desc()",
    )


class SubmissionRevision(Base):
    """Append-only record of every content a student handed in."""

    __tablename__ = "submission_revisions"

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String(10), nullable=False)
    content = Column(Text, nullable=False)
    file_url = Column(String(1024), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False)

    submission = relationship("Submission", back_populates="revisions")
