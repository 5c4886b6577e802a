from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class DashboardStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    completion_rate: int = Field(..., description="percent of visible requests completed")
    average_lead_time_days: int
    my_tasks: int


class ActivityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    action: str
    request_id: Optional[uuid.UUID] = Field(default=None, validation_alias="request_ref")
    request_title: Optional[str] = None
    actor_id: Optional[uuid.UUID] = None
    details: Dict[str, Any] = Field(default_factory=dict, validation_alias="details_json")
    created_at: datetime
