# app/services/activity_service.py
from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog


class ActivityAction:
    REQUEST_CREATED = "REQUEST_CREATED"
    REQUEST_UPDATED = "REQUEST_UPDATED"
    REQUEST_DELETED = "REQUEST_DELETED"

    # assignment
    REQUEST_CLAIMED = "REQUEST_CLAIMED"
    REQUEST_RELEASED = "REQUEST_RELEASED"

    # lifecycle
    STATUS_CHANGED = "STATUS_CHANGED"

    # attachments
    FILE_UPLOAD_STARTED = "FILE_UPLOAD_STARTED"
    FILE_DELETED = "FILE_DELETED"


class ActivityService:
    def write(
        self,
        db: Session,
        *,
        request_ref: Optional[uuid.UUID],
        request_title: Optional[str],
        actor_id: Optional[uuid.UUID],
        action: str,
        http_request_id: Optional[str],
        details: Dict[str, Any],
    ) -> None:
        row = ActivityLog(
            request_ref=request_ref,
            request_title=request_title,
            actor_id=actor_id,
            action=action,
            http_request_id=http_request_id,
            details_json=details,
        )
        db.add(row)
        db.commit()

    def recent(
        self,
        db: Session,
        *,
        request_refs: Optional[List[uuid.UUID]] = None,
        limit: int = 15,
    ) -> List[ActivityLog]:
        """
        Newest first. request_refs=None means unrestricted (admin view);
        an empty list yields nothing.
        """
        stmt = select(ActivityLog).order_by(ActivityLog.created_at.desc()).limit(limit)
        if request_refs is not None:
            if not request_refs:
                return []
            stmt = stmt.where(ActivityLog.request_ref.in_(request_refs))
        return list(db.execute(stmt).scalars().all())
