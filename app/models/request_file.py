# app/models/request_file.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import String, DateTime, BigInteger, ForeignKey, Index, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, JSONType
from app.models.enums import FileCategory


def _now():
    return datetime.now(timezone.utc)


class RequestFile(Base):
    __tablename__ = "request_files"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    request_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("requests.id", ondelete="CASCADE"),
        nullable=False,
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)  # display name
    file_path: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)  # object key
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content_type: Mapped[str] = mapped_column(String(128), nullable=False)

    file_category: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=FileCategory.REQUEST.value,
        server_default=text(f"'{FileCategory.REQUEST.value}'"),
    )

    uploaded_by: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, server_default=func.now()
    )

    metadata_json: Mapped[Dict[str, Any]] = mapped_column(
        "metadata", JSONType, nullable=False, default=dict
    )

    request = relationship("AnalysisRequest", back_populates="files")

    __table_args__ = (
        Index("ix_request_files_request", "request_id", "uploaded_at"),
        Index("ix_request_files_category", "request_id", "file_category"),
    )
