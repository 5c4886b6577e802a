# app/api/v1/notifications.py
from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.errors import NotFoundError, to_http
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.notifications import NotificationOut, UnreadCount
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications")


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return NotificationService().list_for_user(db, principal.user_id, limit=limit)


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return UnreadCount(unread=NotificationService().unread_count(db, principal.user_id))


# must be registered before /{notification_id}/read
@router.put("/read-all")
def mark_all_read(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    updated = NotificationService().mark_all_read(db, principal.user_id)
    return {"updated": updated}


@router.put("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        return NotificationService().mark_read(db, notification_id, principal.user_id)
    except NotFoundError as e:
        raise to_http(e)


@router.delete("/{notification_id}", status_code=204)
def delete_notification(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        NotificationService().delete(db, notification_id, principal.user_id)
    except NotFoundError as e:
        raise to_http(e)
    return Response(status_code=204)
