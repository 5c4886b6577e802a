# app/core/errors.py
from __future__ import annotations

from fastapi import HTTPException


class ForbiddenError(PermissionError):
    """Authenticated, but lacks the role or ownership for the operation."""


class NotFoundError(LookupError):
    pass


class ValidationError(ValueError):
    """Malformed input or a rule violation; the message names the rule."""


class InvalidTransitionError(ValidationError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"cannot move from {current} to {target}")


class AssignmentConflictError(ValueError):
    """Another user already holds the assignment. Caller should refresh and retry."""


class StorageError(RuntimeError):
    """Object storage unreachable or refused the call."""


def to_http(exc: Exception) -> HTTPException:
    """
    Map a domain error onto the HTTP status the API reports.
    Order matters: AssignmentConflictError is a ValueError too. Other
    LookupErrors (KeyError, IndexError) are bugs and stay 500.
    """
    if isinstance(exc, PermissionError):
        return HTTPException(status_code=403, detail=str(exc) or "Forbidden")
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc) or "Not found")
    if isinstance(exc, AssignmentConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, StorageError):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail="Internal server error")
