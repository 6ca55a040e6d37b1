"""Exceptions raised by the planning engine.

Lookups of unknown ids return ``None`` rather than raising; the
``*NotFoundError`` types are only raised by the strict ``require``
helpers. Transition and dependency errors always propagate since they
indicate a caller or data-integrity bug.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mantras.planning.models import TaskStatus


class MantrasError(Exception):
    """Base exception for Mantras errors."""

    pass


class PlanningError(MantrasError):
    """Base exception for the task/plan engine."""

    pass


class TaskNotFoundError(PlanningError):
    """Referenced task id is not in the store."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class PlanNotFoundError(PlanningError):
    """Referenced plan id is not in the store."""

    def __init__(self, plan_id: str) -> None:
        self.plan_id = plan_id
        super().__init__(f"Plan not found: {plan_id}")


class InvalidStatusTransitionError(PlanningError):
    """Attempted a status change the state machine does not allow."""

    def __init__(
        self,
        task_id: str | None,
        current: TaskStatus,
        requested: TaskStatus,
    ) -> None:
        self.task_id = task_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Invalid status transition for task {task_id}: "
            f"{current.value} -> {requested.value}"
        )


class DanglingDependencyError(PlanningError):
    """A dependency id does not resolve to any known task."""

    def __init__(self, task_id: str | None, missing: list[str]) -> None:
        self.task_id = task_id
        self.missing = missing
        owner = task_id or "<new task>"
        super().__init__(
            f"Task {owner} depends on unknown tasks: {', '.join(missing)}"
        )


class CircularDependencyError(PlanningError):
    """Dependency edges form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")
