# app/policies/notification_policy.py
"""
Who hears about a request event, and what they are told.

fanout() is pure: no database, no side effects. It never returns the acting
user, never returns a null recipient, and never returns the same recipient
twice (requester and assignee may coincide).
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from app.models.enums import FileCategory, NotificationType, RequestStatus


class RequestEvent(str, Enum):
    CLAIMED = "claimed"
    RELEASED = "released"
    STATUS_CHANGED = "status_changed"
    FILE_UPLOADED = "file_uploaded"


STATUS_LABELS = {
    RequestStatus.PENDING.value: "Pending",
    RequestStatus.ASSIGNED.value: "Assigned",
    RequestStatus.IN_PROGRESS.value: "In progress",
    RequestStatus.COMPLETED.value: "Completed",
    RequestStatus.CANCELLED.value: "Cancelled",
}


@dataclass(frozen=True)
class RequestSnapshot:
    id: uuid.UUID
    title: str
    status: str
    requester_id: uuid.UUID
    assignee_id: Optional[uuid.UUID]

    @classmethod
    def of(cls, req) -> "RequestSnapshot":
        return cls(
            id=req.id,
            title=req.title,
            status=req.status,
            requester_id=req.requester_id,
            assignee_id=req.assignee_id,
        )


@dataclass(frozen=True)
class NotificationDraft:
    recipient_id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    related_request_id: Optional[uuid.UUID]


def _recipients(candidates: Iterable[Optional[uuid.UUID]], actor_id: uuid.UUID) -> List[uuid.UUID]:
    out: List[uuid.UUID] = []
    for c in candidates:
        if c is None or c == actor_id or c in out:
            continue
        out.append(c)
    return out


def fanout(
    event: RequestEvent,
    before: RequestSnapshot,
    after: RequestSnapshot,
    actor_id: uuid.UUID,
    *,
    file_category: Optional[str] = None,
    file_name: Optional[str] = None,
) -> List[NotificationDraft]:
    if event == RequestEvent.CLAIMED:
        ntype = NotificationType.REQUEST_ASSIGNED
        title = "Request assigned"
        message = f'"{after.title}" now has an assigned analyst.'
        candidates = [after.assignee_id, after.requester_id]

    elif event == RequestEvent.RELEASED:
        ntype = NotificationType.REQUEST_UPDATED
        title = "Assignment released"
        message = f'"{after.title}" was released and is back to Pending.'
        candidates = [after.requester_id, before.assignee_id]

    elif event == RequestEvent.STATUS_CHANGED:
        ntype = (
            NotificationType.REQUEST_COMPLETED
            if after.status == RequestStatus.COMPLETED.value
            else NotificationType.REQUEST_UPDATED
        )
        title = "Request status changed"
        label = STATUS_LABELS.get(after.status, after.status)
        message = f'"{after.title}" is now "{label}".'
        candidates = [after.requester_id, after.assignee_id]

    elif event == RequestEvent.FILE_UPLOADED:
        ntype = NotificationType.FILE_UPLOADED
        if file_category == FileCategory.REPORT.value:
            title = "Report uploaded"
            message = f'A report "{file_name}" was added to "{after.title}".'
            candidates = [after.requester_id]
        else:
            title = "File uploaded"
            message = f'A file "{file_name}" was added to "{after.title}".'
            candidates = [after.assignee_id]

    else:
        return []

    return [
        NotificationDraft(
            recipient_id=rid,
            type=ntype,
            title=title,
            message=message,
            related_request_id=after.id,
        )
        for rid in _recipients(candidates, actor_id)
    ]
