# app/schemas/files.py
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import FileCategory


class UploadInitRequest(BaseModel):
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: int = Field(..., ge=0)
    # omitted → inferred from the extension
    content_type: Optional[str] = Field(default=None, max_length=128)
    # omitted → metadata.type == "report" decides, else request
    category: Optional[FileCategory] = None
    metadata: Optional[Dict[str, Any]] = None


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    request_id: uuid.UUID
    file_name: str
    file_path: str
    file_size: int
    content_type: str
    file_category: FileCategory
    uploaded_by: uuid.UUID
    uploaded_at: datetime
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="metadata_json")


class UploadTicketOut(BaseModel):
    file_id: uuid.UUID
    upload_url: str
    path: str
    expires_in: int


class DownloadOut(BaseModel):
    download_url: str
    file_name: str
    file_size: int
    content_type: str
