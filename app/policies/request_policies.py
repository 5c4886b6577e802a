# app/policies/request_policies.py
"""
Pure authorization predicates for analysis requests.

Predicates take anything exposing requester_id / assignee_id (ORM rows or
snapshots) so they can be unit-tested without a database. The enforce_*
helpers raise ForbiddenError and are what services call.
"""
from __future__ import annotations

from sqlalchemy import or_, true
from sqlalchemy.sql.elements import ColumnElement

from app.core.errors import ForbiddenError
from app.models.enums import FileCategory, UserRole
from app.models.request import AnalysisRequest
from app.policies.rbac import Principal


# ─────────────────────────────────────────────
# VISIBILITY
# ─────────────────────────────────────────────

def visibility_clause(principal: Principal) -> ColumnElement[bool]:
    """
    WHERE clause restricting AnalysisRequest rows to what the caller may see.
    """
    if principal.role == UserRole.ADMIN:
        return true()

    if principal.role == UserRole.ANALYST:
        return or_(
            AnalysisRequest.assignee_id.is_(None),
            AnalysisRequest.assignee_id == principal.user_id,
        )

    # designer, and anything else
    return AnalysisRequest.requester_id == principal.user_id


# ─────────────────────────────────────────────
# PARTICIPANT CHECKS
# ─────────────────────────────────────────────

def _is_owner_designer(principal: Principal, req) -> bool:
    return principal.role == UserRole.DESIGNER and req.requester_id == principal.user_id


def _is_assigned_analyst(principal: Principal, req) -> bool:
    return (
        principal.role == UserRole.ANALYST
        and req.assignee_id is not None
        and req.assignee_id == principal.user_id
    )


def is_participant_actor(principal: Principal, req) -> bool:
    """admin, the designer who owns it, or the analyst working on it."""
    return (
        principal.role == UserRole.ADMIN
        or _is_owner_designer(principal, req)
        or _is_assigned_analyst(principal, req)
    )


def can_claim(principal: Principal) -> bool:
    return principal.role in {UserRole.ANALYST, UserRole.ADMIN}


def can_release(principal: Principal, req) -> bool:
    if principal.role == UserRole.ADMIN:
        return True
    return req.assignee_id is not None and req.assignee_id == principal.user_id


def can_transition_status(principal: Principal, req) -> bool:
    return is_participant_actor(principal, req)


def can_edit(principal: Principal, req) -> bool:
    return is_participant_actor(principal, req)


def can_delete(principal: Principal) -> bool:
    return principal.role == UserRole.ADMIN


def can_create(principal: Principal) -> bool:
    return principal.role in {UserRole.DESIGNER, UserRole.ADMIN}


# ─────────────────────────────────────────────
# FILES
# ─────────────────────────────────────────────

def can_upload(principal: Principal, req) -> bool:
    return is_participant_actor(principal, req)


def can_download(principal: Principal, req) -> bool:
    # any participant may read, regardless of role
    return (
        principal.role == UserRole.ADMIN
        or req.requester_id == principal.user_id
        or (req.assignee_id is not None and req.assignee_id == principal.user_id)
    )


def can_delete_file(principal: Principal, req, file) -> bool:
    if principal.role == UserRole.ADMIN:
        return True
    if file.file_category == FileCategory.REQUEST.value:
        return _is_owner_designer(principal, req)
    if file.file_category == FileCategory.REPORT.value:
        return principal.role == UserRole.ANALYST and file.uploaded_by == principal.user_id
    return False


# ─────────────────────────────────────────────
# ENFORCEMENT
# ─────────────────────────────────────────────

def enforce_can_create(principal: Principal) -> None:
    if not can_create(principal):
        raise ForbiddenError("Only designers or admins may create requests.")


def enforce_can_claim(principal: Principal) -> None:
    if not can_claim(principal):
        raise ForbiddenError("Only analysts or admins may take an assignment.")


def enforce_can_release(principal: Principal, req) -> None:
    if not can_release(principal, req):
        raise ForbiddenError("Only the current assignee or an admin may release a request.")


def enforce_can_transition(principal: Principal, req) -> None:
    if not can_transition_status(principal, req):
        raise ForbiddenError("Not permitted to change the status of this request.")


def enforce_can_edit(principal: Principal, req) -> None:
    if not can_edit(principal, req):
        raise ForbiddenError("Not permitted to edit this request.")


def enforce_can_delete(principal: Principal) -> None:
    if not can_delete(principal):
        raise ForbiddenError("Only admins may delete requests.")


def enforce_can_upload(principal: Principal, req) -> None:
    if not can_upload(principal, req):
        raise ForbiddenError("Not permitted to upload files to this request.")


def enforce_can_download(principal: Principal, req) -> None:
    if not can_download(principal, req):
        raise ForbiddenError("Not permitted to access files of this request.")


def enforce_can_delete_file(principal: Principal, req, file) -> None:
    if not can_delete_file(principal, req, file):
        raise ForbiddenError("Not permitted to delete this file.")
