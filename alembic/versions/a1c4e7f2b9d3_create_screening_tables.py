"""create screening_jobs and detection_logs

Revision ID: a1c4e7f2b9d3
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates:
  screening_jobs    one row per screened upload
  detection_logs    audit rows (flags, exclusions, splits) per job
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c4e7f2b9d3"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── screening_jobs ───────────────────────────────────────────────
    op.create_table(
        "screening_jobs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("row_count", sa.Integer(), nullable=True),
        sa.Column("column_count", sa.Integer(), nullable=True),
        sa.Column("flagged_entries", sa.JSON(), nullable=True),
        sa.Column("pii_columns", sa.JSON(), nullable=True),
        sa.Column("excluded_columns", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_screening_jobs_id", "screening_jobs", ["id"], unique=False)

    # ── detection_logs ───────────────────────────────────────────────
    op.create_table(
        "detection_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=False),
        sa.Column("column_name", sa.String(), nullable=True),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("rule_id", sa.String(), nullable=True),
        sa.Column("needs_review", sa.Boolean(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["job_id"], ["screening_jobs.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_detection_logs_id", "detection_logs", ["id"], unique=False)
    op.create_index("ix_detection_logs_rule_id", "detection_logs", ["rule_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_detection_logs_rule_id", table_name="detection_logs")
    op.drop_index("ix_detection_logs_id", table_name="detection_logs")
    op.drop_table("detection_logs")
    op.drop_index("ix_screening_jobs_id", table_name="screening_jobs")
    op.drop_table("screening_jobs")
