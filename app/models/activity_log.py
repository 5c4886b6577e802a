# app/models/activity_log.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import String, DateTime, Index, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, JSONType


def _now():
    return datetime.now(timezone.utc)


class ActivityLog(Base):
    """
    Append-only trail of request lifecycle events (never UPDATE).
    Feeds the dashboard activity feed.

    request_ref is a loose reference so entries survive request deletion.
    """

    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    request_ref: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    request_title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)  # e.g. REQUEST_CLAIMED

    # X-Request-Id correlation
    http_request_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    details_json: Mapped[Dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_activity_request", "request_ref"),
        Index("ix_activity_created_at", "created_at"),
    )
