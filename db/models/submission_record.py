"""
db/models/submission_record.py

Raw ESG submission stored as an opaque JSON blob.

The reporting pipeline never interprets columns here beyond ordering: the
payload is exactly what the data-entry form or IoT ingestion wrote.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class SubmissionRecord(Base):
    __tablename__ = "esg_submissions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Stable listing order of the stored submission set",
    )
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        comment="Submission exactly as written by the producer (flat or nested shape)",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_esg_submissions_position", "position"),
    )
