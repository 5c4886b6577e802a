# app/api/v1/files.py
from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.errors import NotFoundError, StorageError, to_http
from app.core.storage import get_storage
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.files import DownloadOut, FileOut, UploadInitRequest, UploadTicketOut
from app.services.activity_service import ActivityAction, ActivityService
from app.services.files_service import FileService

router = APIRouter(prefix="/requests/{request_id}/files")

DOMAIN_ERRORS = (PermissionError, NotFoundError, ValueError, StorageError)


@router.get("", response_model=List[FileOut])
def list_files(
    request_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    storage=Depends(get_storage),
):
    try:
        return FileService(storage).list_files(db, request_id, principal)
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.post("", response_model=UploadTicketOut, status_code=201)
def initiate_upload(
    request_id: uuid.UUID,
    body: UploadInitRequest,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    storage=Depends(get_storage),
):
    """
    Step one of an upload: reserves the metadata row and returns a
    short-lived PUT URL. The client sends the bytes straight to storage.
    """
    try:
        ticket = FileService(storage).initiate_upload(
            db,
            request_id,
            file_name=body.file_name,
            size=body.file_size,
            content_type=body.content_type,
            category=body.category,
            principal=principal,
            metadata=body.metadata,
        )
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    file_id = ticket.file.id
    ActivityService().write(
        db,
        request_ref=request_id,
        request_title=None,
        actor_id=principal.user_id,
        action=ActivityAction.FILE_UPLOAD_STARTED,
        http_request_id=getattr(request.state, "request_id", None),
        details={"file_id": str(file_id), "file_name": body.file_name},
    )

    return UploadTicketOut(
        file_id=file_id,
        upload_url=ticket.upload_url,
        path=ticket.path,
        expires_in=ticket.expires_in,
    )


@router.get("/{file_id}/download", response_model=DownloadOut)
def download_file(
    request_id: uuid.UUID,
    file_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    storage=Depends(get_storage),
):
    try:
        f, url = FileService(storage).download_url(db, request_id, file_id, principal)
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    return DownloadOut(
        download_url=url,
        file_name=f.file_name,
        file_size=f.file_size,
        content_type=f.content_type,
    )


@router.delete("/{file_id}", status_code=204)
def delete_file(
    request_id: uuid.UUID,
    file_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    storage=Depends(get_storage),
):
    try:
        FileService(storage).delete_file(db, request_id, file_id, principal)
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    ActivityService().write(
        db,
        request_ref=request_id,
        request_title=None,
        actor_id=principal.user_id,
        action=ActivityAction.FILE_DELETED,
        http_request_id=getattr(request.state, "request_id", None),
        details={"file_id": str(file_id)},
    )
    return Response(status_code=204)
