# app/api/v1/requests.py
from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.errors import NotFoundError, to_http
from app.core.storage import get_storage
from app.db.session import get_db
from app.models.enums import RequestStatus
from app.models.request import AnalysisRequest
from app.policies.rbac import Principal
from app.schemas.requests import (
    AssignRequest,
    RequestCreate,
    RequestEnvelope,
    RequestOut,
    RequestUpdate,
    StatusChange,
)
from app.services.activity_service import ActivityAction, ActivityService
from app.services.requests_service import RequestService

router = APIRouter(prefix="/requests")

DOMAIN_ERRORS = (PermissionError, NotFoundError, ValueError)


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _to_out(req: AnalysisRequest, has_report: bool = False) -> RequestOut:
    out = RequestOut.model_validate(req)
    return out.model_copy(update={"has_report": has_report})


def _record(
    db: Session,
    request: Request,
    principal: Principal,
    req_id: uuid.UUID,
    title: Optional[str],
    action: str,
    details: dict,
) -> None:
    ActivityService().write(
        db,
        request_ref=req_id,
        request_title=title,
        actor_id=principal.user_id,
        action=action,
        http_request_id=getattr(request.state, "request_id", None),
        details=details,
    )


# ─────────────────────────────────────────────────────────────
# LIST / READ
# ─────────────────────────────────────────────────────────────

@router.get("", response_model=List[RequestOut])
def list_requests(
    status: Optional[RequestStatus] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    svc = RequestService()
    rows = svc.list_visible(db, principal, status=status)
    with_report = svc.ids_with_report(db, [r.id for r in rows])
    return [_to_out(r, r.id in with_report) for r in rows]


@router.get("/{request_id}", response_model=RequestOut)
def get_request(
    request_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    svc = RequestService()
    try:
        req = svc.get_visible(db, request_id, principal)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return _to_out(req, req.id in svc.ids_with_report(db, [req.id]))


# ─────────────────────────────────────────────────────────────
# CREATE / EDIT / DELETE
# ─────────────────────────────────────────────────────────────

@router.post("", response_model=RequestEnvelope, status_code=201)
def create_request(
    body: RequestCreate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        req = RequestService().create(db, principal, body.model_dump())
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    _record(db, request, principal, req.id, req.title, ActivityAction.REQUEST_CREATED, {})
    return RequestEnvelope(request=_to_out(req), message="Request created.")


@router.put("/{request_id}", response_model=RequestEnvelope)
def edit_request(
    request_id: uuid.UUID,
    body: RequestUpdate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    patch = body.model_dump(exclude_unset=True)
    try:
        req = RequestService().edit_fields(db, request_id, patch, principal)
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    _record(
        db, request, principal, req.id, req.title,
        ActivityAction.REQUEST_UPDATED, {"fields": sorted(patch)},
    )
    return RequestEnvelope(request=_to_out(req), message="Request updated.")


@router.delete("/{request_id}", status_code=204)
def delete_request(
    request_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    storage=Depends(get_storage),
):
    try:
        RequestService(storage=storage).delete(db, request_id, principal)
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    _record(db, request, principal, request_id, None, ActivityAction.REQUEST_DELETED, {})
    return Response(status_code=204)


# ─────────────────────────────────────────────────────────────
# ASSIGNMENT
# ─────────────────────────────────────────────────────────────

@router.put("/{request_id}/assign", response_model=RequestEnvelope)
def claim_request(
    request_id: uuid.UUID,
    request: Request,
    body: Optional[AssignRequest] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    assignee_id = body.assignee_id if body else None
    try:
        req = RequestService().claim(db, request_id, principal, assignee_id=assignee_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    _record(
        db, request, principal, req.id, req.title,
        ActivityAction.REQUEST_CLAIMED, {"assignee_id": str(req.assignee_id)},
    )
    return RequestEnvelope(request=_to_out(req), message="Assigned.")


@router.delete("/{request_id}/assign", response_model=RequestEnvelope)
def release_request(
    request_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        req = RequestService().release(db, request_id, principal)
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    _record(db, request, principal, req.id, req.title, ActivityAction.REQUEST_RELEASED, {})
    return RequestEnvelope(request=_to_out(req), message="Assignment released.")


# ─────────────────────────────────────────────────────────────
# STATUS
# ─────────────────────────────────────────────────────────────

@router.put("/{request_id}/status", response_model=RequestEnvelope)
def change_status(
    request_id: uuid.UUID,
    body: StatusChange,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        req = RequestService().transition_status(db, request_id, body.status, principal)
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    _record(
        db, request, principal, req.id, req.title,
        ActivityAction.STATUS_CHANGED, {"status": req.status},
    )
    return RequestEnvelope(request=_to_out(req), message=f"Status changed to {req.status}.")
