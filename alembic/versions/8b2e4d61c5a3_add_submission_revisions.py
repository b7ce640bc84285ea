"""add submission revisions log

Revision ID: 8b2e4d61c5a3
Revises: 3f1c9a7d2b10
Create Date: 2026-10-12 21:40:03.552917

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b2e4d61c5a3'
down_revision: Union[str, Sequence[str], None] = '3f1c9a7d2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "submission_revisions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("submission_id", sa.Integer(), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("file_url", sa.String(1024), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_submission_revisions_id", "submission_revisions", ["id"])
    op.create_index("ix_submission_revisions_submission_id", "submission_revisions", ["submission_id"])

    # seed the log with the current content of existing submissions
    op.execute(
        "INSERT INTO submission_revisions (submission_id, type, content, file_url, submitted_at) "
        "SELECT id, type, content, file_url, submitted_at FROM submissions"
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_submission_revisions_submission_id", table_name="submission_revisions")
    op.drop_index("ix_submission_revisions_id", table_name="submission_revisions")
    op.drop_table("submission_revisions")
