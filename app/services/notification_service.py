# app/services/notification_service.py
from __future__ import annotations

import logging
import uuid
from typing import List, Sequence

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models.notification import Notification
from app.policies.notification_policy import NotificationDraft

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Notifications are a side effect of request mutations.

    emit() is fire-and-forget: callers commit their own mutation first, and a
    failure here is logged and rolled back without reaching the caller.
    """

    def emit(self, db: Session, drafts: Sequence[NotificationDraft]) -> int:
        if not drafts:
            return 0
        try:
            for d in drafts:
                db.add(
                    Notification(
                        user_id=d.recipient_id,
                        type=d.type.value,
                        title=d.title,
                        message=d.message,
                        related_request_id=d.related_request_id,
                        is_read=False,
                    )
                )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(
                "notification emit failed recipients=%s",
                [str(d.recipient_id) for d in drafts],
            )
            return 0
        return len(drafts)

    # ---------------------------
    # RECIPIENT-SIDE
    # ---------------------------

    def list_for_user(self, db: Session, user_id: uuid.UUID, limit: int = 50) -> List[Notification]:
        return list(
            db.execute(
                select(Notification)
                .where(Notification.user_id == user_id)
                .order_by(Notification.created_at.desc())
                .limit(limit)
            ).scalars().all()
        )

    def unread_count(self, db: Session, user_id: uuid.UUID) -> int:
        return db.execute(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        ).scalar_one()

    def _get_own(self, db: Session, notification_id: uuid.UUID, user_id: uuid.UUID) -> Notification:
        # other users' notifications are indistinguishable from missing ones
        row = db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        ).scalar_one_or_none()
        if not row:
            raise NotFoundError("Notification not found.")
        return row

    def mark_read(self, db: Session, notification_id: uuid.UUID, user_id: uuid.UUID) -> Notification:
        row = self._get_own(db, notification_id, user_id)
        if not row.is_read:
            row.is_read = True
            db.commit()
            db.refresh(row)
        return row

    def mark_all_read(self, db: Session, user_id: uuid.UUID) -> int:
        res = db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        db.commit()
        return res.rowcount or 0

    def delete(self, db: Session, notification_id: uuid.UUID, user_id: uuid.UUID) -> None:
        row = self._get_own(db, notification_id, user_id)
        db.delete(row)
        db.commit()
