# app/schemas/requests.py
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import AnalysisType, RequestPriority, RequestStatus
from app.schemas.users import ProfileSummary


class RequestCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    car_model: str = Field(..., min_length=1, max_length=100)
    analysis_type: AnalysisType
    priority: RequestPriority = RequestPriority.MEDIUM
    requested_deadline: date


class RequestUpdate(BaseModel):
    """
    Partial edit of descriptive fields. Status and assignment have their own
    endpoints; any other key is rejected.
    """
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    car_model: Optional[str] = Field(default=None, min_length=1, max_length=100)
    analysis_type: Optional[AnalysisType] = None
    priority: Optional[RequestPriority] = None
    requested_deadline: Optional[date] = None


class StatusChange(BaseModel):
    status: RequestStatus


class AssignRequest(BaseModel):
    # admin only; omitted = assign to self
    assignee_id: Optional[uuid.UUID] = None


class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: str
    car_model: str
    analysis_type: str
    priority: RequestPriority
    status: RequestStatus
    requested_deadline: date
    requester_id: uuid.UUID
    assignee_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    requester: Optional[ProfileSummary] = None
    assignee: Optional[ProfileSummary] = None
    has_report: bool = False


class RequestEnvelope(BaseModel):
    request: RequestOut
    message: Optional[str] = None
