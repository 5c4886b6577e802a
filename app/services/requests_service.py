# app/services/requests_service.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from app.core.errors import (
    AssignmentConflictError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from app.core.request_status_graph import is_allowed_transition
from app.models.enums import FileCategory, RequestStatus, UserRole
from app.models.notification import Notification
from app.models.profile import UserProfile
from app.models.request import AnalysisRequest
from app.models.request_file import RequestFile
from app.policies import request_policies as rp
from app.policies.notification_policy import RequestEvent, RequestSnapshot, fanout
from app.policies.rbac import Principal, parse_role
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

# status and assignee only move through claim/release/transition
EDITABLE_FIELDS = frozenset(
    {"title", "description", "car_model", "analysis_type", "priority", "requested_deadline"}
)


def _now():
    return datetime.now(timezone.utc)


def _plain(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


class RequestService:
    """
    Request lifecycle authority.

    Every operation takes the caller as an explicit Principal. Authorization
    is checked before any rule about the request's state, so an unauthorized
    caller always sees Forbidden rather than a hint about the state machine.
    """

    def __init__(self, notifications: Optional[NotificationService] = None, storage=None):
        self.notifications = notifications or NotificationService()
        self.storage = storage

    # ---------------------------
    # READS
    # ---------------------------

    def _get(self, db: Session, request_id: uuid.UUID) -> AnalysisRequest:
        req = db.get(AnalysisRequest, request_id)
        if not req:
            raise NotFoundError("Request not found.")
        return req

    def get_visible(self, db: Session, request_id: uuid.UUID, principal: Principal) -> AnalysisRequest:
        """
        Single fetch under the same visibility filter as the list.
        Invisible and missing requests are both reported as not found.
        """
        req = db.execute(
            select(AnalysisRequest).where(
                AnalysisRequest.id == request_id,
                rp.visibility_clause(principal),
            )
        ).unique().scalar_one_or_none()
        if not req:
            raise NotFoundError("Request not found.")
        return req

    def list_visible(
        self,
        db: Session,
        principal: Principal,
        *,
        status: Optional[RequestStatus] = None,
    ) -> List[AnalysisRequest]:
        stmt = (
            select(AnalysisRequest)
            .where(rp.visibility_clause(principal))
            .order_by(AnalysisRequest.created_at.desc())
        )
        if status is not None:
            stmt = stmt.where(AnalysisRequest.status == status.value)
        return list(db.execute(stmt).unique().scalars().all())

    def ids_with_report(self, db: Session, request_ids: List[uuid.UUID]) -> Set[uuid.UUID]:
        if not request_ids:
            return set()
        rows = db.execute(
            select(RequestFile.request_id)
            .where(
                RequestFile.request_id.in_(request_ids),
                RequestFile.file_category == FileCategory.REPORT.value,
            )
            .distinct()
        ).scalars().all()
        return set(rows)

    # ---------------------------
    # MUTATIONS
    # ---------------------------

    def create(self, db: Session, principal: Principal, data: Dict[str, Any]) -> AnalysisRequest:
        rp.enforce_can_create(principal)

        req = AnalysisRequest(
            title=data["title"],
            description=data["description"],
            car_model=data["car_model"],
            analysis_type=_plain(data["analysis_type"]),
            priority=_plain(data.get("priority") or "medium"),
            requested_deadline=data["requested_deadline"],
            status=RequestStatus.PENDING.value,
            requester_id=principal.user_id,
            assignee_id=None,
        )
        db.add(req)
        db.commit()
        db.refresh(req)
        logger.info("request created id=%s requester=%s", req.id, principal.user_id)
        return req

    def _resolve_claim_target(
        self, db: Session, principal: Principal, assignee_id: Optional[uuid.UUID]
    ) -> uuid.UUID:
        if assignee_id is None or assignee_id == principal.user_id:
            return principal.user_id

        # assigning someone else is the admin-initiated variant
        if principal.role != UserRole.ADMIN:
            raise PermissionError("Only admins may assign a request to another user.")

        target = db.get(UserProfile, assignee_id)
        if not target or not target.is_active:
            raise ValidationError("Assignee does not exist.")
        if parse_role(target.role) not in {UserRole.ANALYST, UserRole.ADMIN}:
            raise ValidationError("Assignee must be an analyst or admin.")
        return assignee_id

    def claim(
        self,
        db: Session,
        request_id: uuid.UUID,
        principal: Principal,
        *,
        assignee_id: Optional[uuid.UUID] = None,
    ) -> AnalysisRequest:
        """
        Rules:
        - caller must be analyst or admin
        - already held by target → no-op
        - held by anyone else → AssignmentConflictError
        - pending → assigned as part of the same write

        The write is conditional on the row still being unassigned; losing
        that race is reported as a conflict, never retried.
        """
        rp.enforce_can_claim(principal)
        target_id = self._resolve_claim_target(db, principal, assignee_id)

        req = self._get(db, request_id)

        if req.assignee_id == target_id:
            return req  # idempotent re-claim
        if req.assignee_id is not None:
            raise AssignmentConflictError("Request is already assigned to another user.")

        before = RequestSnapshot.of(req)
        new_status = (
            RequestStatus.ASSIGNED.value
            if req.status == RequestStatus.PENDING.value
            else req.status
        )

        res = db.execute(
            update(AnalysisRequest)
            .where(
                AnalysisRequest.id == request_id,
                AnalysisRequest.assignee_id.is_(None),
            )
            .values(assignee_id=target_id, status=new_status, updated_at=_now())
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(req)

        if res.rowcount != 1:
            if req.assignee_id == target_id:
                return req  # a concurrent claim for the same target landed first
            logger.info(
                "claim lost race request=%s caller=%s holder=%s",
                request_id, principal.user_id, req.assignee_id,
            )
            raise AssignmentConflictError("Request is already assigned to another user.")

        logger.info("request claimed id=%s assignee=%s by=%s", req.id, target_id, principal.user_id)

        drafts = fanout(RequestEvent.CLAIMED, before, RequestSnapshot.of(req), principal.user_id)
        self.notifications.emit(db, drafts)
        return req

    def release(self, db: Session, request_id: uuid.UUID, principal: Principal) -> AnalysisRequest:
        """
        Clears the assignee and always resets the workflow to pending,
        whatever status the request had reached.
        """
        req = self._get(db, request_id)
        rp.enforce_can_release(principal, req)

        before = RequestSnapshot.of(req)

        req.assignee_id = None
        req.status = RequestStatus.PENDING.value
        req.updated_at = _now()
        db.commit()
        db.refresh(req)

        logger.info(
            "request released id=%s former_assignee=%s prior_status=%s by=%s",
            req.id, before.assignee_id, before.status, principal.user_id,
        )

        drafts = fanout(RequestEvent.RELEASED, before, RequestSnapshot.of(req), principal.user_id)
        self.notifications.emit(db, drafts)
        return req

    def transition_status(
        self,
        db: Session,
        request_id: uuid.UUID,
        target: RequestStatus,
        principal: Principal,
    ) -> AnalysisRequest:
        req = self._get(db, request_id)
        rp.enforce_can_transition(principal, req)

        current = RequestStatus(req.status)
        if not is_allowed_transition(current, target):
            raise InvalidTransitionError(current.value, target.value)

        before = RequestSnapshot.of(req)

        req.status = target.value
        req.updated_at = _now()
        db.commit()
        db.refresh(req)

        logger.info(
            "request status id=%s %s->%s by=%s",
            req.id, current.value, target.value, principal.user_id,
        )

        drafts = fanout(RequestEvent.STATUS_CHANGED, before, RequestSnapshot.of(req), principal.user_id)
        self.notifications.emit(db, drafts)
        return req

    def edit_fields(
        self,
        db: Session,
        request_id: uuid.UUID,
        patch: Dict[str, Any],
        principal: Principal,
    ) -> AnalysisRequest:
        req = self._get(db, request_id)
        rp.enforce_can_edit(principal, req)

        illegal = sorted(set(patch) - EDITABLE_FIELDS)
        if illegal:
            raise ValidationError(f"Fields not editable: {', '.join(illegal)}")

        cleared = sorted(k for k, v in patch.items() if v is None)
        if cleared:
            raise ValidationError(f"Fields cannot be empty: {', '.join(cleared)}")

        for key, value in patch.items():
            setattr(req, key, _plain(value))
        req.updated_at = _now()

        db.commit()
        db.refresh(req)
        return req

    def delete(self, db: Session, request_id: uuid.UUID, principal: Principal) -> None:
        """
        Admin only. Metadata goes first and is committed; object removal
        afterwards is best-effort and only logged on failure.
        """
        rp.enforce_can_delete(principal)
        req = self._get(db, request_id)

        keys = list(
            db.execute(
                select(RequestFile.file_path).where(RequestFile.request_id == request_id)
            ).scalars().all()
        )

        db.execute(delete(RequestFile).where(RequestFile.request_id == request_id))
        db.execute(
            update(Notification)
            .where(Notification.related_request_id == request_id)
            .values(related_request_id=None)
        )
        db.delete(req)
        db.commit()

        logger.info("request deleted id=%s files=%d by=%s", request_id, len(keys), principal.user_id)

        if keys and self.storage is not None:
            try:
                self.storage.remove(keys)
            except StorageError:
                logger.warning(
                    "object cleanup failed after request delete id=%s keys=%s",
                    request_id, keys, exc_info=True,
                )
