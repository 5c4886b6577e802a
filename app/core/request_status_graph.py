# app/core/request_status_graph.py
from app.models.enums import RequestStatus

ALLOWED_STATUS_TRANSITIONS = {
    RequestStatus.PENDING: {
        RequestStatus.ASSIGNED,
    },

    RequestStatus.ASSIGNED: {
        RequestStatus.IN_PROGRESS,
        RequestStatus.PENDING,
    },

    RequestStatus.IN_PROGRESS: {
        RequestStatus.COMPLETED,
        RequestStatus.ASSIGNED,
    },

    RequestStatus.COMPLETED: {
        RequestStatus.IN_PROGRESS,
    },

    # present in the data model, nothing moves into or out of it yet
    RequestStatus.CANCELLED: set(),
}


def is_allowed_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in ALLOWED_STATUS_TRANSITIONS.get(current, set())
