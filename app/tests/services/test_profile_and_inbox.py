import uuid
from datetime import date, timedelta

import pytest

from app.core.errors import NotFoundError, ValidationError
from app.core.security import hash_password
from app.models.enums import NotificationType, RequestStatus, UserRole
from app.policies.notification_policy import NotificationDraft
from app.services.auth_service import authenticate, signup
from app.services.dashboard_service import DashboardService
from app.services.notification_service import NotificationService
from app.services.profile_service import ProfileService
from app.services.requests_service import RequestService


# ---------------------------
# auth / profiles
# ---------------------------

def test_signup_always_creates_designer(db):
    p = signup(db, "New.User@Example.com", "s3cretpass", "New User")
    assert p.role == UserRole.DESIGNER.value
    assert p.email == "new.user@example.com"


def test_signup_rejects_duplicate_email(db):
    signup(db, "dup@example.com", "s3cretpass", None)
    with pytest.raises(ValidationError):
        signup(db, "DUP@example.com", "s3cretpass", None)


def test_authenticate_checks_password_and_active_flag(db, make_profile):
    make_profile(UserRole.ANALYST, email="ana@example.com", password_hash=hash_password("pw-123456"))
    make_profile(UserRole.ANALYST, email="gone@example.com", password_hash=hash_password("pw-123456"), active=False)

    assert authenticate(db, "ana@example.com", "pw-123456") is not None
    assert authenticate(db, "ana@example.com", "wrong") is None
    assert authenticate(db, "gone@example.com", "pw-123456") is None


def test_admin_cannot_change_own_role(db, make_profile, as_principal):
    admin = make_profile(UserRole.ADMIN)
    with pytest.raises(ValidationError):
        ProfileService().admin_update(
            db, as_principal(admin), admin.id,
            email=admin.email, full_name="x", role=UserRole.ANALYST,
        )


def test_admin_changes_other_role(db, make_profile, as_principal):
    admin = make_profile(UserRole.ADMIN)
    user = make_profile(UserRole.DESIGNER)
    out = ProfileService().admin_update(
        db, as_principal(admin), user.id,
        email=user.email, full_name=user.full_name, role=UserRole.ANALYST,
    )
    assert out.role == UserRole.ANALYST.value


def test_non_admin_cannot_list_users(db, make_profile, as_principal):
    analyst = make_profile(UserRole.ANALYST)
    with pytest.raises(PermissionError):
        ProfileService().list_all(db, as_principal(analyst))


def test_update_self_only_touches_name(db, make_profile, as_principal):
    me = make_profile(UserRole.ANALYST)
    out = ProfileService().update_self(db, as_principal(me), full_name="Renamed")
    assert out.full_name == "Renamed"
    assert out.role == UserRole.ANALYST.value


# ---------------------------
# notifications
# ---------------------------

def _drafts(recipient_id, n):
    return [
        NotificationDraft(
            recipient_id=recipient_id,
            type=NotificationType.REQUEST_UPDATED,
            title=f"t{i}",
            message="m",
            related_request_id=None,
        )
        for i in range(n)
    ]


def test_inbox_read_flags(db, make_profile):
    svc = NotificationService()
    me = make_profile(UserRole.DESIGNER)
    assert svc.emit(db, _drafts(me.id, 3)) == 3
    assert svc.unread_count(db, me.id) == 3

    first = svc.list_for_user(db, me.id)[0]
    svc.mark_read(db, first.id, me.id)
    assert svc.unread_count(db, me.id) == 2

    assert svc.mark_all_read(db, me.id) == 2
    assert svc.unread_count(db, me.id) == 0


def test_cannot_touch_someone_elses_notification(db, make_profile):
    svc = NotificationService()
    me = make_profile(UserRole.DESIGNER)
    other = make_profile(UserRole.DESIGNER)
    svc.emit(db, _drafts(other.id, 1))
    theirs = svc.list_for_user(db, other.id)[0]

    with pytest.raises(NotFoundError):
        svc.mark_read(db, theirs.id, me.id)
    with pytest.raises(NotFoundError):
        svc.delete(db, theirs.id, me.id)
    with pytest.raises(NotFoundError):
        svc.delete(db, uuid.uuid4(), me.id)


def test_emit_nothing_is_a_noop(db):
    assert NotificationService().emit(db, []) == 0


# ---------------------------
# dashboard
# ---------------------------

def test_dashboard_counts_visible_requests(db, make_profile, as_principal):
    designer = as_principal(make_profile(UserRole.DESIGNER))
    analyst = as_principal(make_profile(UserRole.ANALYST))
    svc = RequestService()

    ids = []
    for i in range(4):
        r = svc.create(
            db,
            designer,
            {
                "title": f"r{i}",
                "description": "d",
                "car_model": "M",
                "analysis_type": "thermal",
                "requested_deadline": date.today() + timedelta(days=3),
            },
        )
        ids.append(r.id)

    svc.claim(db, ids[0], analyst)
    svc.transition_status(db, ids[0], RequestStatus.IN_PROGRESS, analyst)
    svc.transition_status(db, ids[0], RequestStatus.COMPLETED, analyst)

    stats = DashboardService().stats(db, designer)
    assert stats["total"] == 4
    assert stats["by_status"][RequestStatus.COMPLETED.value] == 1
    assert stats["by_status"][RequestStatus.PENDING.value] == 3
    assert stats["completion_rate"] == 25
    assert stats["my_tasks"] == 4

    analyst_stats = DashboardService().stats(db, analyst)
    assert analyst_stats["my_tasks"] == 1
