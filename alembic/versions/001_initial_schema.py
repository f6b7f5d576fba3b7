"""Initial schema: dubbing jobs and viewer language preferences.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ACTIVE_STATES = "state IN ('queued', 'submitted', 'processing')"


def upgrade() -> None:
    # ── 1. Dubbing jobs ───────────────────────────────────────────
    op.create_table(
        "dub_jobs",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("section_id", sa.String(255), nullable=False),
        sa.Column("source_video_location", sa.Text, nullable=False),
        sa.Column("target_language", sa.String(16), nullable=False),
        sa.Column("state", sa.String(20), nullable=False, server_default="queued"),
        sa.Column("remote_job_id", sa.String(255), nullable=True),
        sa.Column("result_track_location", sa.Text, nullable=True),
        sa.Column("last_error", sa.Text, nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("processing_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_dub_jobs_section", "dub_jobs", ["section_id", "target_language"])
    op.create_index("idx_dub_jobs_state", "dub_jobs", ["state"])
    # At most one non-terminal job per (section, language).
    op.create_index(
        "uq_dub_jobs_active_pair",
        "dub_jobs",
        ["section_id", "target_language"],
        unique=True,
        postgresql_where=sa.text(_ACTIVE_STATES),
    )

    # ── 2. Language preferences ───────────────────────────────────
    op.create_table(
        "language_preferences",
        sa.Column("viewer_id", sa.String(255), nullable=False),
        sa.Column("section_id", sa.String(255), nullable=False),
        sa.Column("language", sa.String(16), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("viewer_id", "section_id"),
    )


def downgrade() -> None:
    op.drop_table("language_preferences")
    op.drop_index("uq_dub_jobs_active_pair", table_name="dub_jobs")
    op.drop_table("dub_jobs")
