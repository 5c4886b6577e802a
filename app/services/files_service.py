# app/services/files_service.py
from __future__ import annotations

import logging
import os
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import NotFoundError, StorageError, ValidationError
from app.models.enums import FileCategory
from app.models.request import AnalysisRequest
from app.models.request_file import RequestFile
from app.policies import request_policies as rp
from app.policies.notification_policy import RequestEvent, RequestSnapshot, fanout
from app.policies.rbac import Principal
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


ALLOWED_CONTENT_TYPES = frozenset(
    {
        "application/step",
        "application/iges",
        "application/x-pdf",
        "application/pdf",
        "image/png",
        "image/jpeg",
        "image/gif",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    }
)

EXTENSION_CONTENT_TYPES = {
    "txt": "text/plain",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "step": "application/step",
    "stp": "application/step",
    "iges": "application/iges",
    "igs": "application/iges",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
}


def _now():
    return datetime.now(timezone.utc)


def content_type_from_name(file_name: str) -> str:
    ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return EXTENSION_CONTENT_TYPES.get(ext, "application/octet-stream")


def safe_object_name(file_name: str) -> str:
    """
    Storage-side name: timestamp + random token + original extension.
    The display name is never part of the key (non-ASCII, slashes, etc).
    """
    _, ext = os.path.splitext(os.path.basename(file_name.replace("\\", "/")))
    ext = "".join(ch for ch in ext.lower() if ch.isalnum() or ch == ".")[:16]
    ts = int(_now().timestamp() * 1000)
    return f"{ts}_{secrets.token_hex(4)}_{uuid.uuid4().hex[:8]}{ext}"


def build_file_path(request_id: uuid.UUID, uploader_id: uuid.UUID, safe_name: str) -> str:
    return f"{request_id}/{uploader_id}/{safe_name}"


@dataclass(frozen=True)
class UploadTicket:
    file: RequestFile
    upload_url: str
    path: str
    expires_in: int


class FileService:
    def __init__(self, storage, notifications: Optional[NotificationService] = None):
        self.storage = storage
        self.notifications = notifications or NotificationService()

    def _get_request(self, db: Session, request_id: uuid.UUID) -> AnalysisRequest:
        req = db.get(AnalysisRequest, request_id)
        if not req:
            raise NotFoundError("Request not found.")
        return req

    def _get_file(self, db: Session, request_id: uuid.UUID, file_id: uuid.UUID) -> RequestFile:
        f = db.execute(
            select(RequestFile).where(
                RequestFile.id == file_id,
                RequestFile.request_id == request_id,
            )
        ).scalar_one_or_none()
        if not f:
            raise NotFoundError("File not found.")
        return f

    # ---------------------------
    # UPLOAD
    # ---------------------------

    def validate_declared(self, size: int, content_type: str) -> None:
        settings = get_settings()
        if size < 0:
            raise ValidationError("File size must not be negative.")
        if size > settings.max_upload_bytes:
            mb = settings.max_upload_bytes // (1024 * 1024)
            raise ValidationError(f"File size must not exceed {mb}MB.")
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(f"Unsupported file type: {content_type}")

    def initiate_upload(
        self,
        db: Session,
        request_id: uuid.UUID,
        *,
        file_name: str,
        size: int,
        content_type: Optional[str],
        category: Optional[FileCategory],
        principal: Principal,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> UploadTicket:
        """
        Two phases:
        1. validate, insert the metadata row (committed)
        2. obtain a presigned PUT URL for the bytes

        If phase 2 fails the row from phase 1 is deleted before the error
        propagates, so metadata never outlives the bytes it describes.
        """
        req = self._get_request(db, request_id)
        rp.enforce_can_upload(principal, req)

        declared_type = content_type or content_type_from_name(file_name)
        self.validate_declared(size, declared_type)

        meta = dict(metadata or {})
        if category is None:
            category = (
                FileCategory.REPORT
                if meta.get("type") == FileCategory.REPORT.value
                else FileCategory.REQUEST
            )

        safe_name = safe_object_name(file_name)
        path = build_file_path(req.id, principal.user_id, safe_name)

        meta.setdefault("originalFileName", file_name)
        meta.setdefault("safeFileName", safe_name)
        meta.setdefault("type", category.value)
        meta.setdefault("uploadedAt", _now().isoformat())

        row = RequestFile(
            request_id=req.id,
            file_name=file_name,
            file_path=path,
            file_size=size,
            content_type=declared_type,
            file_category=category.value,
            uploaded_by=principal.user_id,
            metadata_json=meta,
        )
        db.add(row)
        db.commit()
        db.refresh(row)

        try:
            upload_url = self.storage.presign_upload(path, declared_type)
        except StorageError:
            logger.exception("upload URL issuance failed, rolling back metadata file=%s", row.id)
            db.delete(row)
            db.commit()
            raise

        logger.info(
            "upload initiated request=%s file=%s category=%s by=%s",
            req.id, row.id, category.value, principal.user_id,
        )

        snap = RequestSnapshot.of(req)
        drafts = fanout(
            RequestEvent.FILE_UPLOADED,
            snap,
            snap,
            principal.user_id,
            file_category=category.value,
            file_name=file_name,
        )
        self.notifications.emit(db, drafts)

        return UploadTicket(
            file=row,
            upload_url=upload_url,
            path=path,
            expires_in=get_settings().upload_url_expires_s,
        )

    # ---------------------------
    # READ
    # ---------------------------

    def list_files(self, db: Session, request_id: uuid.UUID, principal: Principal) -> List[RequestFile]:
        req = self._get_request(db, request_id)
        rp.enforce_can_download(principal, req)
        return list(
            db.execute(
                select(RequestFile)
                .where(RequestFile.request_id == request_id)
                .order_by(RequestFile.uploaded_at.desc())
            ).scalars().all()
        )

    def download_url(
        self,
        db: Session,
        request_id: uuid.UUID,
        file_id: uuid.UUID,
        principal: Principal,
    ) -> Tuple[RequestFile, str]:
        f = self._get_file(db, request_id, file_id)
        req = self._get_request(db, request_id)
        rp.enforce_can_download(principal, req)
        return f, self.storage.presign_download(f.file_path)

    # ---------------------------
    # DELETE
    # ---------------------------

    def delete_file(
        self,
        db: Session,
        request_id: uuid.UUID,
        file_id: uuid.UUID,
        principal: Principal,
    ) -> None:
        f = self._get_file(db, request_id, file_id)
        req = self._get_request(db, request_id)
        rp.enforce_can_delete_file(principal, req, f)

        path = f.file_path
        db.delete(f)
        db.commit()
        logger.info("file deleted request=%s file=%s by=%s", request_id, file_id, principal.user_id)

        try:
            self.storage.remove([path])
        except StorageError:
            logger.warning("object cleanup failed after file delete path=%s", path, exc_info=True)
