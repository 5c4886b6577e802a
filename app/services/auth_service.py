# app/services/auth_service.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.security import verify_password
from app.models.enums import UserRole
from app.models.profile import UserProfile
from app.services.profile_service import ProfileService


def authenticate(db: Session, email: str, password: str) -> Optional[UserProfile]:
    p = db.execute(
        select(UserProfile).where(
            func.lower(UserProfile.email) == email.strip().lower(),
            UserProfile.is_active.is_(True),
        )
    ).scalar_one_or_none()

    if not p:
        return None

    if not verify_password(password, p.password_hash):
        return None

    return p


def signup(db: Session, email: str, password: str, full_name: Optional[str]) -> UserProfile:
    # self-registration never chooses a role
    return ProfileService().create(
        db,
        email=email,
        password=password,
        role=UserRole.DESIGNER,
        full_name=full_name,
    )
