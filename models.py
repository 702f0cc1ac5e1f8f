"""Pydantic models for tasks, tickets, and the dashboard API."""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field, field_validator, model_validator


def _as_utc(value: datetime) -> datetime:
    # Naive instants are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class TaskStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    ACTIVE = "active"
    ATTENTION = "attention"
    OVERDUE = "overdue"
    COMPLETED = "completed"


class TicketCategory(str, Enum):
    BILLING = "Billing / Payment"
    ACCOUNT = "Login / Account"
    TECHNICAL = "Technical Issue"
    REFUND = "Refund"
    GENERAL = "General Query"


class TicketStatus(str, Enum):
    NEW = "New"
    IN_PROGRESS = "In Progress"
    PENDING = "Pending"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


OPEN_STATUSES = (TicketStatus.NEW, TicketStatus.IN_PROGRESS, TicketStatus.PENDING)
DONE_STATUSES = (TicketStatus.RESOLVED, TicketStatus.CLOSED)


class TicketUrgency(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Team(str, Enum):
    BILLING = "Billing Team"
    ACCOUNT = "Account Support Team"
    TECHNICAL = "Technical Support Team"
    FINANCE = "Finance Team"
    GENERAL = "General Support Team"


class AuthorRole(str, Enum):
    CUSTOMER = "customer"
    SUPPORT = "support"


# --- Tasks ---


class Task(BaseModel):
    """A stored task. completed_at is set iff status is completed."""

    id: str
    title: str
    description: str = ""
    deadline: UtcDatetime
    warning_boundary_hours: float = Field(ge=0, allow_inf_nan=False)
    status: TaskStatus = TaskStatus.ACTIVE
    created_at: UtcDatetime
    completed_at: Optional[UtcDatetime] = None

    @model_validator(mode="after")
    def completed_at_matches_status(self) -> "Task":
        if (self.status == TaskStatus.COMPLETED) != (self.completed_at is not None):
            raise ValueError("completed_at must be set exactly when status is completed")
        return self


class TaskWithPriority(Task):
    """Task plus fields derived from the current time. Never persisted."""

    priority: TaskPriority
    remaining_ms: int
    progress_percent: float = Field(ge=0, le=100)
    boundary_message: Optional[str] = None


class TaskCreate(BaseModel):
    """Incoming payload for POST /tasks."""

    title: str
    description: str = ""
    deadline: UtcDatetime
    warning_boundary: float = Field(default=24, ge=0, allow_inf_nan=False)
    warning_boundary_unit: Literal["hours", "days"] = "hours"

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("title")
    @classmethod
    def title_required(cls, value: str) -> str:
        if not value:
            raise ValueError("title is required")
        return value

    @model_validator(mode="after")
    def boundary_hours_finite(self) -> "TaskCreate":
        if not math.isfinite(self.warning_boundary_hours):
            raise ValueError("warning boundary is too large")
        return self

    @property
    def warning_boundary_hours(self) -> float:
        if self.warning_boundary_unit == "days":
            return self.warning_boundary * 24
        return self.warning_boundary


class TaskOverview(BaseModel):
    total: int  # tasks not yet completed
    attention: int
    overdue: int
    completed: int


# --- Tickets ---


class TicketResponse(BaseModel):
    id: str
    author: str
    author_role: AuthorRole
    message: str
    created_at: UtcDatetime


class TimelineEvent(BaseModel):
    id: str
    event: str
    timestamp: UtcDatetime
    actor: str


class Ticket(BaseModel):
    """A support ticket. responses and timeline are append-only."""

    id: str
    customer_id: str
    customer_name: str
    customer_email: str
    subject: str
    description: str
    category: TicketCategory
    status: TicketStatus = TicketStatus.NEW
    urgency: TicketUrgency
    assigned_team: Team
    created_at: UtcDatetime
    updated_at: UtcDatetime
    responses: List[TicketResponse] = Field(default_factory=list)
    timeline: List[TimelineEvent] = Field(default_factory=list)


class TicketCreate(BaseModel):
    """Incoming ticket payload for POST /tickets."""

    customer_id: str
    customer_name: str
    customer_email: str
    subject: str
    description: str

    @field_validator("customer_id", "customer_name", "subject", "description")
    @classmethod
    def required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("field must not be empty")
        return value


class StatusUpdate(BaseModel):
    status: TicketStatus


class ResponseCreate(BaseModel):
    message: str
    author_role: AuthorRole

    @field_validator("message")
    @classmethod
    def message_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message must not be empty")
        return value


class ClassifyRequest(BaseModel):
    subject: str = ""
    description: str = ""


class Classification(BaseModel):
    """Auto-detected classification for a piece of ticket text."""

    category: TicketCategory
    urgency: TicketUrgency
    assigned_team: Team


class TicketStats(BaseModel):
    total: int
    by_status: Dict[TicketStatus, int]
    by_category: Dict[TicketCategory, int]
    by_urgency: Dict[TicketUrgency, int]
    new_today: int
    overdue: int
    open: int
    resolved: int
    high_urgency: int


class TeamStats(BaseModel):
    total: int
    open: int
    high_urgency: int
    resolved: int


# --- Notifications ---


class Notification(BaseModel):
    """An in-page toast."""

    level: Literal["success", "info", "warning", "error"]
    title: str
    description: Optional[str] = None
    created_at: UtcDatetime
