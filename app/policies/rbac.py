#app/policies/rbac.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from app.models.enums import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """
    The authenticated caller, threaded explicitly into every service call.
    """
    user_id: uuid.UUID
    role: UserRole
    email: str = ""
    display_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def parse_role(raw: Optional[str]) -> UserRole:
    """
    Boundary parser for the loosely-typed role column.
    Anything outside the enumeration is treated as a designer, the least
    privileged role.
    """
    try:
        return UserRole((raw or "").strip().lower())
    except ValueError:
        logger.warning("unknown role %r, treating as designer", raw)
        return UserRole.DESIGNER


def require_role(principal: Principal, *roles: UserRole) -> None:
    if principal.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise PermissionError(
            f"Role {principal.role.value} not permitted; requires one of: {allowed}."
        )
