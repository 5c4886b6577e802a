# app/services/profile_service.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.core.security import hash_password
from app.models.enums import UserRole
from app.models.profile import UserProfile
from app.policies.rbac import Principal, require_role

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc)


class ProfileService:
    def get(self, db: Session, user_id: uuid.UUID) -> UserProfile:
        p = db.get(UserProfile, user_id)
        if not p:
            raise NotFoundError("User not found.")
        return p

    def _email_taken(self, db: Session, email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        stmt = select(UserProfile.id).where(func.lower(UserProfile.email) == email.lower())
        if exclude_id is not None:
            stmt = stmt.where(UserProfile.id != exclude_id)
        return db.execute(stmt).first() is not None

    def create(
        self,
        db: Session,
        *,
        email: str,
        password: str,
        role: UserRole,
        full_name: Optional[str] = None,
    ) -> UserProfile:
        email = email.strip().lower()
        if self._email_taken(db, email):
            raise ValidationError("A user with this email already exists.")

        p = UserProfile(
            email=email,
            full_name=full_name,
            role=role.value,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(p)
        db.commit()
        db.refresh(p)
        logger.info("profile created id=%s role=%s", p.id, p.role)
        return p

    def update_self(self, db: Session, principal: Principal, *, full_name: Optional[str]) -> UserProfile:
        """Own profile: display name only, role is never self-editable."""
        p = self.get(db, principal.user_id)
        p.full_name = full_name
        p.updated_at = _now()
        db.commit()
        db.refresh(p)
        return p

    # ---------------------------
    # ADMIN
    # ---------------------------

    def list_all(self, db: Session, principal: Principal) -> List[UserProfile]:
        require_role(principal, UserRole.ADMIN)
        return list(
            db.execute(select(UserProfile).order_by(UserProfile.created_at.desc())).scalars().all()
        )

    def admin_get(self, db: Session, principal: Principal, user_id: uuid.UUID) -> UserProfile:
        require_role(principal, UserRole.ADMIN)
        return self.get(db, user_id)

    def admin_create(
        self,
        db: Session,
        principal: Principal,
        *,
        email: str,
        password: str,
        role: UserRole,
        full_name: Optional[str] = None,
    ) -> UserProfile:
        require_role(principal, UserRole.ADMIN)
        return self.create(db, email=email, password=password, role=role, full_name=full_name)

    def admin_update(
        self,
        db: Session,
        principal: Principal,
        user_id: uuid.UUID,
        *,
        email: str,
        full_name: Optional[str],
        role: UserRole,
    ) -> UserProfile:
        require_role(principal, UserRole.ADMIN)
        p = self.get(db, user_id)

        if p.id == principal.user_id and role.value != p.role:
            raise ValidationError("Admins cannot change their own role.")

        email = email.strip().lower()
        if self._email_taken(db, email, exclude_id=p.id):
            raise ValidationError("A user with this email already exists.")

        if p.role != role.value:
            logger.info("role change user=%s %s->%s by=%s", p.id, p.role, role.value, principal.user_id)

        p.email = email
        p.full_name = full_name
        p.role = role.value
        p.updated_at = _now()
        db.commit()
        db.refresh(p)
        return p
