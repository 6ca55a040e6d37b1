"""In-memory task store.

The store owns the canonical Task objects and only hands out copies,
so every mutation goes through ``create``, ``update`` or ``delete``.
It does no locking of its own; the ExecutionCoordinator serializes
access.
"""

from typing import Any

from loguru import logger

from mantras.planning.dependency_resolver import DependencyResolver
from mantras.planning.exceptions import (
    CircularDependencyError,
    DanglingDependencyError,
    TaskNotFoundError,
)
from mantras.planning.models import (
    Task,
    TaskDraft,
    TaskStatus,
    utc_now,
    validate_transition,
)


class TaskStore:
    """
    Id-indexed registry of tasks.

    Example:
        >>> store = TaskStore()
        >>> task = store.create(TaskDraft(title="Analyse the bug"))
        >>> store.update(task.id, status=TaskStatus.IN_PROGRESS).started_at is not None
        True
        >>> store.get("task_missing") is None
        True
    """

    UPDATABLE_FIELDS = frozenset({
        "title",
        "description",
        "status",
        "priority",
        "dependencies",
        "estimated_time",
        "actual_time",
        "assignee",
        "tags",
        "metadata",
    })

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._resolver = DependencyResolver()

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def create(self, draft: TaskDraft) -> Task:
        """
        Store a new task.

        Args:
            draft: Caller-supplied fields.

        Returns:
            The stored task with id and timestamps assigned.

        Raises:
            DanglingDependencyError: If a dependency id is unknown.
        """
        missing = [dep for dep in draft.dependencies if dep not in self._tasks]
        if missing:
            raise DanglingDependencyError(None, missing)

        now = utc_now()
        task = Task(**draft.model_dump(), created_at=now, updated_at=now)
        if task.status == TaskStatus.IN_PROGRESS:
            task.started_at = now
        elif task.status == TaskStatus.COMPLETED:
            task.started_at = now
            task.completed_at = now

        self._tasks[task.id] = task
        logger.debug(f"Created task {task.id}: {task.title}")
        return task.model_copy(deep=True)

    def update(self, task_id: str, **fields: Any) -> Task | None:
        """
        Update task fields.

        Stamps ``updated_at``. Moving to IN_PROGRESS stamps ``started_at``
        unless already set; moving to COMPLETED stamps ``completed_at``.

        Args:
            task_id: Task ID.
            **fields: Fields to update (see ``UPDATABLE_FIELDS``).

        Returns:
            The updated task, or None if the task is not found.

        Raises:
            ValueError: If a field is unknown or immutable.
            InvalidStatusTransitionError: If the status change is not allowed.
                Tasks in a terminal status reject every update.
            DanglingDependencyError: If new dependencies name unknown tasks.
            CircularDependencyError: If new dependencies create a cycle.
        """
        current = self._tasks.get(task_id)
        if current is None:
            logger.warning(f"Update for unknown task {task_id}")
            return None

        invalid = set(fields) - self.UPDATABLE_FIELDS
        if invalid:
            raise ValueError(f"Cannot update task fields: {sorted(invalid)}")

        data = current.model_dump()
        data.update(fields)
        updated = Task.model_validate(data)

        validate_transition(task_id, current.status, updated.status)

        if updated.dependencies != current.dependencies:
            self._check_dependencies(updated)

        now = utc_now()
        updated.updated_at = now
        if updated.status != current.status:
            if updated.status == TaskStatus.IN_PROGRESS and updated.started_at is None:
                updated.started_at = now
            elif updated.status == TaskStatus.COMPLETED:
                updated.completed_at = now
            logger.info(
                f"Task {task_id} {current.status.value} -> {updated.status.value}"
            )

        self._tasks[task_id] = updated
        return updated.model_copy(deep=True)

    def get(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    def require(self, task_id: str) -> Task:
        """
        Get a task by ID or raise.

        Raises:
            TaskNotFoundError: If the task is not found.
        """
        task = self.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def all(self) -> list[Task]:
        """Get all tasks in creation order."""
        return [task.model_copy(deep=True) for task in self._tasks.values()]

    def dependents(self, task_id: str) -> list[Task]:
        """Get tasks that list ``task_id`` among their dependencies."""
        return self._resolver.dependents(task_id, self.all())

    def delete(self, task_id: str) -> bool:
        """
        Delete a task.

        Dependents keep the dangling id and drop out of the frontier.

        Returns:
            True if deleted, False if not found.
        """
        if task_id not in self._tasks:
            return False
        del self._tasks[task_id]

        orphans = [t.id for t in self._tasks.values() if task_id in t.dependencies]
        if orphans:
            logger.warning(
                f"Deleted task {task_id} is still a dependency of {orphans}"
            )
        return True

    def _check_dependencies(self, task: Task) -> None:
        missing = [dep for dep in task.dependencies if dep not in self._tasks]
        if missing:
            raise DanglingDependencyError(task.id, missing)

        graph = self._resolver.build_graph(self._tasks.values())
        graph[task.id] = list(task.dependencies)
        cycles = self._resolver.detect_cycles(graph)
        if cycles:
            raise CircularDependencyError(cycles[0])
