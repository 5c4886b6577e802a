#app/models/enums.py
from __future__ import annotations
from enum import Enum


class UserRole(str, Enum):
    DESIGNER = "designer"
    ANALYST = "analyst"
    ADMIN = "admin"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RequestPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class AnalysisType(str, Enum):
    STRUCTURAL = "structural"
    THERMAL = "thermal"
    FLUID = "fluid"
    VIBRATION = "vibration"
    CRASH = "crash"
    OTHER = "other"


class FileCategory(str, Enum):
    REQUEST = "request"  # designer input
    REPORT = "report"    # analyst output


class NotificationType(str, Enum):
    REQUEST_CREATED = "request_created"
    REQUEST_ASSIGNED = "request_assigned"
    REQUEST_UPDATED = "request_updated"
    REQUEST_COMPLETED = "request_completed"
    FILE_UPLOADED = "file_uploaded"
