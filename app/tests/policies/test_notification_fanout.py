import itertools
import uuid

import pytest

from app.models.enums import NotificationType
from app.policies.notification_policy import RequestEvent, RequestSnapshot, fanout

REQ_ID = uuid.uuid4()
DESIGNER = uuid.uuid4()
ANALYST = uuid.uuid4()
ADMIN = uuid.uuid4()


def snap(status="pending", assignee=None, requester=DESIGNER):
    return RequestSnapshot(
        id=REQ_ID,
        title="Door panel stiffness",
        status=status,
        requester_id=requester,
        assignee_id=assignee,
    )


def recipients(drafts):
    return [d.recipient_id for d in drafts]


def test_claim_by_analyst_notifies_requester_only():
    drafts = fanout(RequestEvent.CLAIMED, snap(), snap("assigned", ANALYST), ANALYST)
    assert recipients(drafts) == [DESIGNER]
    assert drafts[0].type == NotificationType.REQUEST_ASSIGNED
    assert drafts[0].related_request_id == REQ_ID


def test_admin_assignment_notifies_assignee_and_requester():
    drafts = fanout(RequestEvent.CLAIMED, snap(), snap("assigned", ANALYST), ADMIN)
    assert recipients(drafts) == [ANALYST, DESIGNER]


def test_release_by_admin_notifies_requester_and_former_assignee():
    drafts = fanout(RequestEvent.RELEASED, snap("in_progress", ANALYST), snap(), ADMIN)
    assert recipients(drafts) == [DESIGNER, ANALYST]
    assert all(d.type == NotificationType.REQUEST_UPDATED for d in drafts)


def test_completion_uses_completed_type():
    drafts = fanout(
        RequestEvent.STATUS_CHANGED,
        snap("in_progress", ANALYST),
        snap("completed", ANALYST),
        ANALYST,
    )
    assert recipients(drafts) == [DESIGNER]
    assert drafts[0].type == NotificationType.REQUEST_COMPLETED
    assert "Completed" in drafts[0].message


def test_report_upload_goes_to_requester_request_file_to_assignee():
    s = snap("in_progress", ANALYST)

    report = fanout(RequestEvent.FILE_UPLOADED, s, s, ANALYST, file_category="report", file_name="r.pdf")
    assert recipients(report) == [DESIGNER]

    attachment = fanout(RequestEvent.FILE_UPLOADED, s, s, DESIGNER, file_category="request", file_name="a.step")
    assert recipients(attachment) == [ANALYST]


def test_request_file_on_unassigned_request_notifies_nobody():
    s = snap()
    assert fanout(RequestEvent.FILE_UPLOADED, s, s, DESIGNER, file_category="request", file_name="a.step") == []


def test_requester_who_is_also_assignee_hears_once():
    s = snap("assigned", ADMIN, requester=ADMIN)
    drafts = fanout(RequestEvent.STATUS_CHANGED, s, snap("in_progress", ADMIN, requester=ADMIN), ANALYST)
    assert recipients(drafts) == [ADMIN]


PEOPLE = [DESIGNER, ANALYST, ADMIN, None]


@pytest.mark.parametrize("event", list(RequestEvent))
@pytest.mark.parametrize(
    "actor,assignee_before,assignee_after",
    [
        (actor, before, after)
        for actor, before, after in itertools.product([DESIGNER, ANALYST, ADMIN], PEOPLE, PEOPLE)
    ],
)
def test_fanout_never_includes_actor_null_or_duplicates(event, actor, assignee_before, assignee_after):
    drafts = fanout(
        event,
        snap("assigned", assignee_before),
        snap("in_progress", assignee_after),
        actor,
        file_category="report",
        file_name="x.pdf",
    )
    ids = recipients(drafts)
    assert actor not in ids
    assert None not in ids
    assert len(ids) == len(set(ids))
