"""Dubbing job model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base, TimestampMixin

NON_TERMINAL_STATE_CLAUSE = "state IN ('queued', 'submitted', 'processing')"


class DubJobModel(TimestampMixin, Base):
    __tablename__ = "dub_jobs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    section_id: Mapped[str] = mapped_column(String(255), nullable=False)
    source_video_location: Mapped[str] = mapped_column(Text, nullable=False)
    target_language: Mapped[str] = mapped_column(String(16), nullable=False)
    state: Mapped[str] = mapped_column(String(20), nullable=False, default="queued")
    remote_job_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    result_track_location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    processing_started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("idx_dub_jobs_section", "section_id", "target_language"),
        Index("idx_dub_jobs_state", "state"),
        Index(
            "uq_dub_jobs_active_pair",
            "section_id",
            "target_language",
            unique=True,
            postgresql_where=text(NON_TERMINAL_STATE_CLAUSE),
            sqlite_where=text(NON_TERMINAL_STATE_CLAUSE),
        ),
    )
