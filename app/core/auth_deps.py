#app/core/auth_deps.py
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.security import decode_token
from app.db.session import get_db
from app.models.profile import UserProfile
from app.policies.rbac import Principal, parse_role

bearer = HTTPBearer(auto_error=False)


def get_current_principal(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> Principal:
    """
    Canonical authentication dependency.

    Guarantees:
    - JWT is valid and names an existing, active profile
    - role comes from the profile row, not the token, and is parsed into
      the closed UserRole enum (unknown values degrade to designer)
    """
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=401, detail="Not authenticated.")

    try:
        payload = decode_token(creds.credentials)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid or expired token.")

    sub = payload.get("sub")
    try:
        user_id = uuid.UUID(str(sub))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Token missing required claims.")

    profile = db.get(UserProfile, user_id)
    if not profile or not profile.is_active:
        raise HTTPException(status_code=401, detail="Unknown or inactive user.")

    principal = Principal(
        user_id=profile.id,
        role=parse_role(profile.role),
        email=profile.email,
        display_name=profile.full_name,
    )

    # Make principal available to downstream middleware / handlers
    request.state.principal = principal

    return principal
