import pytest

from app.core.errors import (
    AssignmentConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
    to_http,
)


@pytest.mark.parametrize(
    "exc,status",
    [
        (ForbiddenError("no"), 403),
        (PermissionError("no"), 403),
        (NotFoundError("gone"), 404),
        (ValidationError("bad"), 400),
        (InvalidTransitionError("pending", "completed"), 400),
        (AssignmentConflictError("taken"), 409),
        (StorageError("down"), 502),
        (KeyError("title"), 500),
        (IndexError("list index out of range"), 500),
    ],
)
def test_domain_errors_map_to_http_status(exc, status):
    assert to_http(exc).status_code == status
