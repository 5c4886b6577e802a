# app/models/request.py
from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    String,
    Text,
    Date,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.enums import RequestStatus, RequestPriority


def _now():
    return datetime.now(timezone.utc)


_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in RequestStatus)
_PRIORITY_VALUES = ", ".join(f"'{p.value}'" for p in RequestPriority)


class AnalysisRequest(Base):
    """
    A CAE analysis request.

    requester_id is set once at creation. assignee_id is only written by
    claim/release; status only by claim/release/transition.
    """

    __tablename__ = "requests"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    car_model: Mapped[str] = mapped_column(String(100), nullable=False)
    analysis_type: Mapped[str] = mapped_column(String(32), nullable=False)

    priority: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=RequestPriority.MEDIUM.value,
        server_default=text(f"'{RequestPriority.MEDIUM.value}'"),
    )
    requested_deadline: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=RequestStatus.PENDING.value,
        server_default=text(f"'{RequestStatus.PENDING.value}'"),
    )

    requester_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    assignee_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, server_default=func.now()
    )

    requester = relationship("UserProfile", foreign_keys=[requester_id], lazy="joined")
    assignee = relationship("UserProfile", foreign_keys=[assignee_id], lazy="joined")

    files = relationship(
        "RequestFile",
        back_populates="request",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_requests_status"),
        CheckConstraint(f"priority IN ({_PRIORITY_VALUES})", name="ck_requests_priority"),
        Index("ix_requests_requester", "requester_id"),
        Index("ix_requests_assignee", "assignee_id"),
        Index("ix_requests_status", "status"),
        Index("ix_requests_created_at", "created_at"),
    )
