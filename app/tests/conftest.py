import os
import uuid

# settings are read once at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# FORCE model registration
import app.models  # noqa

from app.core.errors import StorageError
from app.core.security import create_access_token
from app.core.storage import get_storage
from app.db.base import Base
from app.db.session import get_db
from app.main import app as fastapi_app
from app.models.enums import UserRole
from app.models.profile import UserProfile
from app.policies.rbac import Principal, parse_role

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


class FakeStorage:
    """In-memory stand-in for the S3 bucket; flip the flags to simulate outages."""

    def __init__(self):
        self.issued = []
        self.removed = []
        self.fail_presign = False
        self.fail_remove = False

    def presign_upload(self, key, content_type):
        if self.fail_presign:
            raise StorageError("storage unavailable")
        self.issued.append(key)
        return f"https://storage.test/put/{key}"

    def presign_download(self, key):
        if self.fail_presign:
            raise StorageError("storage unavailable")
        return f"https://storage.test/get/{key}"

    def remove(self, keys):
        if self.fail_remove:
            raise StorageError("storage unavailable")
        self.removed.extend(keys)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def make_profile(db):
    def _make(role=UserRole.DESIGNER, *, email=None, password_hash="not-a-real-hash", active=True):
        raw_role = role.value if isinstance(role, UserRole) else role
        p = UserProfile(
            email=email or f"{raw_role}-{uuid.uuid4().hex[:8]}@example.com",
            full_name=f"Test {raw_role}",
            role=raw_role,
            password_hash=password_hash,
            is_active=active,
        )
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make


def principal_of(profile) -> Principal:
    return Principal(
        user_id=profile.id,
        role=parse_role(profile.role),
        email=profile.email,
        display_name=profile.full_name,
    )


def auth_headers(profile) -> dict:
    token = create_access_token(subject=str(profile.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(db, storage):
    def _get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = _get_db
    fastapi_app.dependency_overrides[get_storage] = lambda: storage
    try:
        with TestClient(fastapi_app) as c:
            yield c
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def as_principal():
    return principal_of


@pytest.fixture
def headers_for():
    return auth_headers
