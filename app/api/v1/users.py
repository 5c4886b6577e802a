# app/api/v1/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.errors import NotFoundError, to_http
from app.db.session import get_db
from app.schemas.users import ProfileOut, SelfProfileUpdate
from app.services.profile_service import ProfileService

router = APIRouter(prefix="/users")


@router.get("/me", response_model=ProfileOut)
def read_me(
    db: Session = Depends(get_db),
    principal=Depends(get_current_principal),
):
    try:
        return ProfileService().get(db, principal.user_id)
    except NotFoundError as e:
        raise to_http(e)


@router.put("/me", response_model=ProfileOut)
def update_me(
    body: SelfProfileUpdate,
    db: Session = Depends(get_db),
    principal=Depends(get_current_principal),
):
    try:
        return ProfileService().update_self(db, principal, full_name=body.full_name)
    except (NotFoundError, ValueError) as e:
        raise to_http(e)
