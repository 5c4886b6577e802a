#app/api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.errors import ValidationError
from app.core.security import create_access_token
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.auth import LoginRequest, SignupRequest, TokenResponse
from app.schemas.users import ProfileOut
from app.services.auth_service import authenticate, signup
from app.services.profile_service import ProfileService

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    profile = authenticate(db, req.email, req.password)
    if not profile:
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    token = create_access_token(subject=str(profile.id), claims={"email": profile.email})
    return TokenResponse(access_token=token)


@router.post("/signup", response_model=TokenResponse, status_code=201)
def register(req: SignupRequest, db: Session = Depends(get_db)):
    try:
        profile = signup(db, req.email, req.password, req.full_name)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    token = create_access_token(subject=str(profile.id), claims={"email": profile.email})
    return TokenResponse(access_token=token)


@router.get("/me", response_model=ProfileOut)
def get_me(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return ProfileService().get(db, principal.user_id)
