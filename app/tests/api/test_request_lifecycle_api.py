from datetime import date, timedelta

import pytest
from sqlalchemy import select

from app.models.activity_log import ActivityLog
from app.models.enums import UserRole

API = "/api/v1"


def new_request_body(**overrides):
    body = {
        "title": "Seat rail pull test",
        "description": "ECE R14 anchorage simulation",
        "car_model": "Model S2",
        "analysis_type": "structural",
        "priority": "high",
        "requested_deadline": (date.today() + timedelta(days=7)).isoformat(),
    }
    body.update(overrides)
    return body


@pytest.fixture
def people(make_profile, headers_for):
    designer = make_profile(UserRole.DESIGNER)
    analyst = make_profile(UserRole.ANALYST)
    other_analyst = make_profile(UserRole.ANALYST)
    admin = make_profile(UserRole.ADMIN)
    return {
        "designer": (designer, headers_for(designer)),
        "analyst": (analyst, headers_for(analyst)),
        "other_analyst": (other_analyst, headers_for(other_analyst)),
        "admin": (admin, headers_for(admin)),
    }


def test_health_needs_no_token_and_echoes_request_id(client):
    r = client.get(f"{API}/health", headers={"X-Request-Id": "abc-123"})
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.headers["X-Request-Id"] == "abc-123"


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer not-a-jwt"}, {"Authorization": "Basic abc"}],
)
def test_requests_require_a_valid_token(client, headers):
    r = client.get(f"{API}/requests", headers=headers)
    assert r.status_code == 401


def test_inactive_user_token_is_rejected(client, make_profile, headers_for):
    gone = make_profile(UserRole.ANALYST, active=False)
    r = client.get(f"{API}/requests", headers=headers_for(gone))
    assert r.status_code == 401


def test_full_request_lifecycle(client, db, people):
    designer, d_h = people["designer"]
    analyst, a_h = people["analyst"]
    _, o_h = people["other_analyst"]
    _, admin_h = people["admin"]

    # designer submits
    r = client.post(f"{API}/requests", json=new_request_body(), headers=d_h)
    assert r.status_code == 201, r.text
    req = r.json()["request"]
    rid = req["id"]
    assert req["status"] == "pending"
    assert req["assignee_id"] is None
    assert req["requester"]["id"] == str(designer.id)

    # analyst sees it in the pool and claims it
    pool = client.get(f"{API}/requests", headers=a_h).json()
    assert [x["id"] for x in pool] == [rid]

    r = client.put(f"{API}/requests/{rid}/assign", headers=a_h)
    assert r.status_code == 200, r.text
    assert r.json()["request"]["status"] == "assigned"
    assert r.json()["request"]["assignee_id"] == str(analyst.id)

    # second analyst loses and no longer sees it
    r = client.put(f"{API}/requests/{rid}/assign", headers=o_h)
    assert r.status_code == 409
    assert client.get(f"{API}/requests", headers=o_h).json() == []

    # designer cannot skip ahead
    r = client.put(f"{API}/requests/{rid}/status", json={"status": "completed"}, headers=d_h)
    assert r.status_code == 400
    assert "cannot move from assigned to completed" in r.json()["detail"]

    r = client.put(f"{API}/requests/{rid}/status", json={"status": "in_progress"}, headers=a_h)
    assert r.status_code == 200

    # analyst uploads the report
    r = client.post(
        f"{API}/requests/{rid}/files",
        json={"file_name": "report.pdf", "file_size": 4096, "category": "report"},
        headers=a_h,
    )
    assert r.status_code == 201, r.text
    ticket = r.json()
    assert ticket["upload_url"].startswith("https://storage.test/put/")
    assert ticket["expires_in"] > 0

    detail = client.get(f"{API}/requests/{rid}", headers=d_h).json()
    assert detail["has_report"] is True

    files = client.get(f"{API}/requests/{rid}/files", headers=d_h).json()
    assert [f["file_category"] for f in files] == ["report"]

    dl = client.get(f"{API}/requests/{rid}/files/{ticket['file_id']}/download", headers=d_h)
    assert dl.status_code == 200
    assert dl.json()["file_name"] == "report.pdf"

    r = client.put(f"{API}/requests/{rid}/status", json={"status": "completed"}, headers=a_h)
    assert r.status_code == 200

    inbox = client.get(f"{API}/notifications", headers=d_h).json()
    kinds = {n["type"] for n in inbox}
    assert {"request_assigned", "file_uploaded", "request_completed"} <= kinds
    assert all(n["related_request_id"] == rid for n in inbox)

    # release always lands on pending
    r = client.delete(f"{API}/requests/{rid}/assign", headers=a_h)
    assert r.status_code == 200
    assert r.json()["request"]["status"] == "pending"
    assert r.json()["request"]["assignee_id"] is None

    # only admins delete
    assert client.delete(f"{API}/requests/{rid}", headers=d_h).status_code == 403
    assert client.delete(f"{API}/requests/{rid}", headers=admin_h).status_code == 204
    assert client.get(f"{API}/requests/{rid}", headers=admin_h).status_code == 404

    db.expire_all()
    actions = [a.action for a in db.execute(select(ActivityLog)).scalars().all()]
    for expected in ("REQUEST_CREATED", "REQUEST_CLAIMED", "STATUS_CHANGED",
                     "FILE_UPLOAD_STARTED", "REQUEST_RELEASED", "REQUEST_DELETED"):
        assert expected in actions


def test_analyst_cannot_create_and_designer_cannot_claim(client, people):
    _, d_h = people["designer"]
    _, a_h = people["analyst"]

    assert client.post(f"{API}/requests", json=new_request_body(), headers=a_h).status_code == 403

    rid = client.post(f"{API}/requests", json=new_request_body(), headers=d_h).json()["request"]["id"]
    assert client.put(f"{API}/requests/{rid}/assign", headers=d_h).status_code == 403


def test_admin_assigns_to_named_analyst(client, people):
    _, d_h = people["designer"]
    analyst, a_h = people["analyst"]
    _, admin_h = people["admin"]

    rid = client.post(f"{API}/requests", json=new_request_body(), headers=d_h).json()["request"]["id"]
    r = client.put(
        f"{API}/requests/{rid}/assign",
        json={"assignee_id": str(analyst.id)},
        headers=admin_h,
    )
    assert r.status_code == 200, r.text
    assert r.json()["request"]["assignee_id"] == str(analyst.id)

    unread = client.get(f"{API}/notifications/unread-count", headers=a_h).json()
    assert unread["unread"] == 1


def test_edit_rejects_status_field(client, people):
    _, d_h = people["designer"]
    rid = client.post(f"{API}/requests", json=new_request_body(), headers=d_h).json()["request"]["id"]

    r = client.put(f"{API}/requests/{rid}", json={"status": "completed"}, headers=d_h)
    assert r.status_code == 422

    r = client.put(f"{API}/requests/{rid}", json={"title": "Seat rail pull test v2"}, headers=d_h)
    assert r.status_code == 200
    assert r.json()["request"]["title"] == "Seat rail pull test v2"
    assert r.json()["request"]["status"] == "pending"


def test_status_filter_and_designer_isolation(client, people, make_profile, headers_for):
    _, d_h = people["designer"]
    _, a_h = people["analyst"]
    stranger_h = headers_for(make_profile(UserRole.DESIGNER))

    first = client.post(f"{API}/requests", json=new_request_body(title="a"), headers=d_h).json()["request"]["id"]
    client.post(f"{API}/requests", json=new_request_body(title="b"), headers=d_h)
    client.put(f"{API}/requests/{first}/assign", headers=a_h)

    assigned = client.get(f"{API}/requests", params={"status": "assigned"}, headers=d_h).json()
    assert [x["id"] for x in assigned] == [first]

    assert client.get(f"{API}/requests", headers=stranger_h).json() == []
    assert client.get(f"{API}/requests/{first}", headers=stranger_h).status_code == 404


def test_upload_storage_outage_is_bad_gateway(client, storage, people):
    _, d_h = people["designer"]
    rid = client.post(f"{API}/requests", json=new_request_body(), headers=d_h).json()["request"]["id"]
    storage.fail_presign = True

    r = client.post(
        f"{API}/requests/{rid}/files",
        json={"file_name": "cad.step", "file_size": 100},
        headers=d_h,
    )
    assert r.status_code == 502

    storage.fail_presign = False
    assert client.get(f"{API}/requests/{rid}/files", headers=d_h).json() == []


def test_oversized_upload_is_rejected(client, people):
    _, d_h = people["designer"]
    rid = client.post(f"{API}/requests", json=new_request_body(), headers=d_h).json()["request"]["id"]

    r = client.post(
        f"{API}/requests/{rid}/files",
        json={"file_name": "huge.pdf", "file_size": 60 * 1024 * 1024},
        headers=d_h,
    )
    assert r.status_code == 400


def test_edit_with_null_title_is_bad_request(client, people):
    _, d_h = people["designer"]
    rid = client.post(f"{API}/requests", json=new_request_body(), headers=d_h).json()["request"]["id"]

    r = client.put(f"{API}/requests/{rid}", json={"title": None}, headers=d_h)
    assert r.status_code == 400
    assert "title" in r.json()["detail"]

    assert client.get(f"{API}/requests/{rid}", headers=d_h).json()["title"] == "Seat rail pull test"
