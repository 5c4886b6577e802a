import itertools
from datetime import date, timedelta

import pytest

from app.core.errors import NotFoundError
from app.models.enums import UserRole
from app.models.request import AnalysisRequest
from app.services.requests_service import RequestService

REQUESTERS = ["caller", "foreign"]
ASSIGNEES = [None, "caller", "other_analyst"]


def expected_visible(role, requester, assignee):
    if role == "admin":
        return True
    if role == "analyst":
        return assignee in (None, "caller")
    # designer and any unrecognised role
    return requester == "caller"


@pytest.mark.parametrize("role", ["designer", "analyst", "admin", "superuser"])
def test_list_and_get_apply_the_visibility_rule(db, make_profile, as_principal, role):
    caller = make_profile(role)
    people = {
        "caller": caller,
        "foreign": make_profile(UserRole.DESIGNER),
        "other_analyst": make_profile(UserRole.ANALYST),
    }

    expected = set()
    every = []
    for requester, assignee in itertools.product(REQUESTERS, ASSIGNEES):
        r = AnalysisRequest(
            title=f"{requester}/{assignee}",
            description="grid",
            car_model="Model G",
            analysis_type="other",
            priority="low",
            requested_deadline=date.today() + timedelta(days=1),
            status="pending" if assignee is None else "assigned",
            requester_id=people[requester].id,
            assignee_id=people[assignee].id if assignee else None,
        )
        db.add(r)
        db.commit()
        every.append(r.id)
        if expected_visible(role, requester, assignee):
            expected.add(r.id)

    principal = as_principal(caller)
    svc = RequestService()

    assert {r.id for r in svc.list_visible(db, principal)} == expected

    for rid in every:
        if rid in expected:
            assert svc.get_visible(db, rid, principal).id == rid
        else:
            with pytest.raises(NotFoundError):
                svc.get_visible(db, rid, principal)
