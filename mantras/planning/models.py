"""Pydantic models for tasks and execution plans.

This module defines the data structures used by the planning engine:
task and plan status enums, the task status state machine, task drafts
and stored tasks, execution plans, and the aggregate views (statistics,
progress) returned to callers.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mantras.planning.exceptions import InvalidStatusTransitionError


# =============================================================================
# ENUMS
# =============================================================================


class TaskStatus(str, Enum):
    """Execution status of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    """Task priority level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        """Numeric rank, higher runs first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK: dict[TaskPriority, int] = {
    TaskPriority.URGENT: 4,
    TaskPriority.HIGH: 3,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 1,
}


class PlanStatus(str, Enum):
    """Lifecycle status of an execution plan."""

    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =============================================================================
# STATE MACHINE
# =============================================================================


TERMINAL_STATUSES: frozenset[TaskStatus] = frozenset({
    TaskStatus.COMPLETED,
    TaskStatus.FAILED,
    TaskStatus.CANCELLED,
})

ALLOWED_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({
        TaskStatus.IN_PROGRESS,
        TaskStatus.CANCELLED,
        TaskStatus.BLOCKED,
    }),
    TaskStatus.IN_PROGRESS: frozenset({
        TaskStatus.COMPLETED,
        TaskStatus.FAILED,
        TaskStatus.CANCELLED,
    }),
    # Manual blocks can be lifted again
    TaskStatus.BLOCKED: frozenset({
        TaskStatus.PENDING,
        TaskStatus.CANCELLED,
    }),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.FAILED: frozenset(),
    TaskStatus.CANCELLED: frozenset(),
}


def can_transition(current: TaskStatus, requested: TaskStatus) -> bool:
    """Check whether ``current -> requested`` is a legal status change.

    Re-asserting a non-terminal status is accepted; terminal statuses
    accept nothing, not even themselves.
    """
    if current == requested:
        return current not in TERMINAL_STATUSES
    return requested in ALLOWED_TRANSITIONS[current]


def validate_transition(
    task_id: str | None,
    current: TaskStatus,
    requested: TaskStatus,
) -> None:
    """Raise if ``current -> requested`` is not a legal status change.

    Raises:
        InvalidStatusTransitionError: If the transition is not allowed.
    """
    if not can_transition(current, requested):
        raise InvalidStatusTransitionError(task_id, current, requested)


# =============================================================================
# HELPERS
# =============================================================================


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_task_id() -> str:
    return f"task_{uuid4().hex[:12]}"


def new_plan_id() -> str:
    return f"plan_{uuid4().hex[:12]}"


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


# =============================================================================
# TASKS
# =============================================================================


class TaskMetadata(BaseModel):
    """Caller-supplied annotations on a task.

    The key set is fixed; unknown keys are rejected.

    Attributes:
        notes: Free-text notes attached on status updates.
        source_request: Request text the task was decomposed from.
        template: Name of the decomposition template that produced it.
        step: Zero-based position within the decomposed chain.
    """

    model_config = ConfigDict(extra="forbid")

    notes: str | None = None
    source_request: str | None = None
    template: str | None = None
    step: int | None = Field(default=None, ge=0)


class TaskDraft(BaseModel):
    """Caller-supplied fields for a task that has not been stored yet.

    Example:
        >>> draft = TaskDraft(
        ...     title="Design schema",
        ...     priority=TaskPriority.HIGH,
        ...     dependencies=["task_1a2b3c4d5e6f"],
        ... )
    """

    model_config = ConfigDict(frozen=False)

    title: str = Field(
        ...,
        min_length=1,
        description="Task title",
    )
    description: str = Field(
        default="",
        description="Detailed task description",
    )
    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        description="Initial status",
    )
    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        description="Scheduling priority",
    )
    dependencies: list[str] = Field(
        default_factory=list,
        description="Task IDs that must complete before this task can run",
    )
    estimated_time: float | None = Field(
        default=None,
        ge=0,
        description="Estimated time in minutes",
    )
    actual_time: float | None = Field(
        default=None,
        ge=0,
        description="Actual time spent in minutes",
    )
    assignee: str | None = Field(
        default=None,
        description="Who is working on the task",
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Informational tags",
    )
    metadata: TaskMetadata = Field(
        default_factory=TaskMetadata,
        description="Typed caller annotations",
    )

    @field_validator("dependencies", "tags")
    @classmethod
    def drop_duplicates(cls, v: list[str]) -> list[str]:
        """Treat dependency and tag lists as ordered sets."""
        return _dedupe(v)


class Task(TaskDraft):
    """A stored task with identity and lifecycle timestamps."""

    id: str = Field(
        default_factory=new_task_id,
        description="Unique task identifier",
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether the task can no longer change status."""
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(mode="json")


# =============================================================================
# PLANS
# =============================================================================


class PlanMetadata(BaseModel):
    """How a plan was produced."""

    model_config = ConfigDict(extra="forbid")

    template: str | None = None
    source_request: str | None = None


class ExecutionPlan(BaseModel):
    """A named, ordered collection of task ids created from one request."""

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=new_plan_id)
    title: str = Field(..., min_length=1)
    description: str = ""
    tasks: list[str] = Field(
        default_factory=list,
        description="Ordered ids of the tasks owned by this plan",
    )
    status: PlanStatus = PlanStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    metadata: PlanMetadata = Field(default_factory=PlanMetadata)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(mode="json")


# =============================================================================
# AGGREGATE VIEWS
# =============================================================================


class PlanProgress(BaseModel):
    """Completion counts for a plan."""

    completed: int = 0
    total: int = 0
    percentage: int = 0

    @classmethod
    def from_counts(cls, completed: int, total: int) -> "PlanProgress":
        """Build progress; the percentage rounds half up."""
        percentage = math.floor(completed / total * 100 + 0.5) if total else 0
        return cls(completed=completed, total=total, percentage=percentage)


class TaskStatistics(BaseModel):
    """Aggregate counts over every stored task."""

    total: int = 0
    by_status: dict[str, int] = Field(
        default_factory=lambda: {s.value: 0 for s in TaskStatus}
    )
    by_priority: dict[str, int] = Field(
        default_factory=lambda: {p.value: 0 for p in TaskPriority}
    )
    executable: int = Field(
        default=0,
        description="Size of the frontier",
    )
    blocked: int = Field(
        default=0,
        description="PENDING tasks that are not in the frontier",
    )
    dangling: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Task ID -> dependency IDs that resolve to nothing",
    )
