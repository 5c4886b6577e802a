from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: str
    title: str
    message: str
    related_request_id: Optional[uuid.UUID] = None
    is_read: bool
    created_at: datetime


class UnreadCount(BaseModel):
    unread: int
