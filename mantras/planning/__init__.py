"""Task planning - decomposing requests into plans and tracking execution.

This module provides the planning engine:
- Task and plan stores (id-indexed, in-memory)
- Dependency resolution (which tasks can run now)
- Scheduling (priority queue over the executable tasks)
- Decomposition (request text -> dependency-chained tasks)
- Execution coordination (the public operations)
"""

from mantras.planning.coordinator import ExecutionCoordinator
from mantras.planning.decomposer import (
    DEFAULT_TEMPLATES,
    GENERIC_TEMPLATE,
    DecompositionTemplate,
    Decomposer,
    StepTemplate,
)
from mantras.planning.dependency_resolver import DependencyResolver
from mantras.planning.exceptions import (
    CircularDependencyError,
    DanglingDependencyError,
    InvalidStatusTransitionError,
    MantrasError,
    PlanNotFoundError,
    PlanningError,
    TaskNotFoundError,
)
from mantras.planning.locks import ReadWriteLock
from mantras.planning.models import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    ExecutionPlan,
    PlanMetadata,
    PlanProgress,
    PlanStatus,
    Task,
    TaskDraft,
    TaskMetadata,
    TaskPriority,
    TaskStatistics,
    TaskStatus,
    can_transition,
    validate_transition,
)
from mantras.planning.plan_store import PlanStore
from mantras.planning.scheduler import Scheduler
from mantras.planning.task_store import TaskStore

__all__ = [
    # Models
    "ExecutionPlan",
    "PlanMetadata",
    "PlanProgress",
    "PlanStatus",
    "Task",
    "TaskDraft",
    "TaskMetadata",
    "TaskPriority",
    "TaskStatistics",
    "TaskStatus",
    # State machine
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "can_transition",
    "validate_transition",
    # Errors
    "CircularDependencyError",
    "DanglingDependencyError",
    "InvalidStatusTransitionError",
    "MantrasError",
    "PlanNotFoundError",
    "PlanningError",
    "TaskNotFoundError",
    # Stores
    "PlanStore",
    "TaskStore",
    # Resolution and scheduling
    "DependencyResolver",
    "ReadWriteLock",
    "Scheduler",
    # Decomposition
    "DEFAULT_TEMPLATES",
    "GENERIC_TEMPLATE",
    "DecompositionTemplate",
    "Decomposer",
    "StepTemplate",
    # Coordination
    "ExecutionCoordinator",
]
