from fastapi import APIRouter

from app.api.v1.health import router as health_router
from app.api.v1.auth import router as auth_router
from app.api.v1.users import router as users_router
from app.api.v1.admin.users import router as admin_users_router

# REQUEST LIFECYCLE
from app.api.v1.requests import router as requests_router
from app.api.v1.files import router as files_router

from app.api.v1.notifications import router as notifications_router
from app.api.v1.dashboard import router as dashboard_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM / CORE
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(auth_router, tags=["auth"])
v1_router.include_router(users_router, tags=["users"])
v1_router.include_router(admin_users_router)

# ------------------------------------------------------------------
# REQUESTS
# ------------------------------------------------------------------
v1_router.include_router(requests_router, tags=["requests"])
v1_router.include_router(files_router, tags=["files"])

# ------------------------------------------------------------------
# INBOX / OVERVIEW
# ------------------------------------------------------------------
v1_router.include_router(notifications_router, tags=["notifications"])
v1_router.include_router(dashboard_router, tags=["dashboard"])
