# app/api/v1/admin/users.py
import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.errors import NotFoundError, to_http
from app.db.session import get_db
from app.schemas.users import AdminProfileCreate, AdminProfileUpdate, ProfileOut
from app.services.profile_service import ProfileService

router = APIRouter(prefix="/admin/users", tags=["admin"])

DOMAIN_ERRORS = (PermissionError, NotFoundError, ValueError)


@router.get("", response_model=List[ProfileOut])
def list_users(
    db: Session = Depends(get_db),
    principal=Depends(get_current_principal),
):
    try:
        return ProfileService().list_all(db, principal)
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.post("", response_model=ProfileOut, status_code=201)
def create_user(
    body: AdminProfileCreate,
    db: Session = Depends(get_db),
    principal=Depends(get_current_principal),
):
    try:
        return ProfileService().admin_create(
            db,
            principal,
            email=body.email,
            password=body.password,
            role=body.role,
            full_name=body.full_name,
        )
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.get("/{user_id}", response_model=ProfileOut)
def get_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal=Depends(get_current_principal),
):
    try:
        return ProfileService().admin_get(db, principal, user_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.put("/{user_id}", response_model=ProfileOut)
def update_user(
    user_id: uuid.UUID,
    body: AdminProfileUpdate,
    db: Session = Depends(get_db),
    principal=Depends(get_current_principal),
):
    try:
        return ProfileService().admin_update(
            db,
            principal,
            user_id,
            email=body.email,
            full_name=body.full_name,
            role=body.role,
        )
    except DOMAIN_ERRORS as e:
        raise to_http(e)
