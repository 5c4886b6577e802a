# app/services/dashboard_service.py
from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog
from app.models.enums import RequestStatus, UserRole
from app.policies.rbac import Principal
from app.services.activity_service import ActivityService
from app.services.requests_service import RequestService


class DashboardService:
    """
    Aggregates over what the caller can see. Nothing here is authoritative;
    it is recomputed on every call.
    """

    def stats(self, db: Session, principal: Principal) -> Dict[str, Any]:
        rows = RequestService().list_visible(db, principal)

        counts = {s.value: 0 for s in RequestStatus}
        for r in rows:
            counts[r.status] = counts.get(r.status, 0) + 1

        total = len(rows)
        completed = [r for r in rows if r.status == RequestStatus.COMPLETED.value]

        # lead time = created → last update of a completed request, in days
        if completed:
            days = [
                (r.updated_at - r.created_at).total_seconds() / 86400.0 for r in completed
            ]
            avg_lead_days = round(sum(days) / len(days))
        else:
            avg_lead_days = 0

        if principal.role == UserRole.DESIGNER:
            my_tasks = sum(1 for r in rows if r.requester_id == principal.user_id)
        elif principal.role == UserRole.ANALYST:
            my_tasks = sum(1 for r in rows if r.assignee_id == principal.user_id)
        else:
            my_tasks = total

        return {
            "total": total,
            "by_status": counts,
            "completion_rate": round(len(completed) / total * 100) if total else 0,
            "average_lead_time_days": avg_lead_days,
            "my_tasks": my_tasks,
        }

    def activities(self, db: Session, principal: Principal, limit: int = 15) -> List[ActivityLog]:
        if principal.role == UserRole.ADMIN:
            return ActivityService().recent(db, limit=limit)

        visible = [r.id for r in RequestService().list_visible(db, principal)]
        return ActivityService().recent(db, request_refs=visible, limit=limit)
