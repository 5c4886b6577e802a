# app/schemas/users.py
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.enums import UserRole


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    # raw column value; may be outside UserRole for legacy rows
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProfileSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    role: str


class SelfProfileUpdate(BaseModel):
    """Role is intentionally absent."""
    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = Field(default=None, max_length=256)


class AdminProfileUpdate(BaseModel):
    email: EmailStr
    full_name: Optional[str] = Field(default=None, max_length=256)
    role: UserRole


class AdminProfileCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    full_name: Optional[str] = Field(default=None, max_length=256)
    role: UserRole = UserRole.DESIGNER
