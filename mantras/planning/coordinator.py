"""Execution coordinator - the public face of the planning engine.

Composes the task and plan stores, the dependency resolver, the
scheduler and the decomposer. Every operation returns plain,
JSON-serializable dicts so protocol servers and the CLI can pass results
straight through.
"""

from typing import Any

from loguru import logger

from mantras.planning.decomposer import Decomposer
from mantras.planning.dependency_resolver import DependencyResolver
from mantras.planning.exceptions import InvalidStatusTransitionError
from mantras.planning.locks import ReadWriteLock
from mantras.planning.models import (
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
)
from mantras.planning.plan_store import PlanStore
from mantras.planning.scheduler import Scheduler
from mantras.planning.task_store import TaskStore

PLAN_RECOMMENDATIONS = [
    "Execute tasks in dependency order",
    "Check task status and progress regularly",
    "Adjust the plan promptly when a task gets blocked",
]

TASK_NOT_FOUND = "task not found"
PLAN_NOT_FOUND = "plan not found"
ALL_DONE_OR_BLOCKED = "All tasks completed or blocked"


class ExecutionCoordinator:
    """
    Create plans, advance them, and apply status updates.

    Mutations (plan creation, status updates, auto-progress, deletion)
    take the write side of a reader/writer lock; status queries take
    the read side, so a query never observes a half-applied update.

    Example:
        >>> coordinator = ExecutionCoordinator()
        >>> created = coordinator.create_execution_plan("实现用户认证系统")
        >>> plan_id = created["plan"]["id"]
        >>> coordinator.execute_plan(plan_id, auto_progress=True)["current_task"]["status"]
        'in_progress'
        >>> coordinator.get_task_status(plan_id=plan_id)["statistics"]["total"]
        5
    """

    def __init__(
        self,
        task_store: TaskStore | None = None,
        plan_store: PlanStore | None = None,
        decomposer: Decomposer | None = None,
        resolver: DependencyResolver | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.tasks = task_store or TaskStore()
        self.plans = plan_store or PlanStore()
        self.decomposer = decomposer or Decomposer()
        self.resolver = resolver or DependencyResolver()
        self.scheduler = scheduler or Scheduler()
        self._lock = ReadWriteLock()

    def __repr__(self) -> str:
        return (
            f"ExecutionCoordinator(tasks={len(self.tasks)}, "
            f"plans={len(self.plans)})"
        )

    # =========================================================================
    # PLANS
    # =========================================================================

    def create_execution_plan(
        self,
        request: str,
        auto_decompose: bool = True,
    ) -> dict[str, Any]:
        """
        Create a plan for a free-text request.

        Args:
            request: Non-empty request text.
            auto_decompose: Split the request into a task chain. When
                False the request becomes a single MEDIUM task.

        Returns:
            Dict with ``plan``, ``tasks``, ``recommendations`` and
            ``next_actions``.

        Raises:
            ValueError: If the request is blank.
        """
        if not request or not request.strip():
            raise ValueError("Request must be a non-empty string")

        with self._lock.write():
            if auto_decompose:
                template = self.decomposer.classify(request).name
                tasks = self.decomposer.build(request, self.tasks)
            else:
                template = "direct"
                tasks = [
                    self.tasks.create(
                        TaskDraft(
                            title=request,
                            description=request,
                            priority=TaskPriority.MEDIUM,
                            tags=["user-request"],
                            metadata=TaskMetadata(
                                source_request=request,
                                template=template,
                            ),
                        )
                    )
                ]

            plan = self.plans.create(
                title=f"Execution plan: {request}",
                description=request,
                tasks=[task.id for task in tasks],
                metadata=PlanMetadata(template=template, source_request=request),
            )

            queue = self._plan_queue(plan)

        next_actions = (
            [f"Start: {queue[0].title}"] if queue else [ALL_DONE_OR_BLOCKED]
        )

        return {
            "plan": plan.to_dict(),
            "tasks": [task.to_dict() for task in tasks],
            "recommendations": list(PLAN_RECOMMENDATIONS),
            "next_actions": next_actions,
        }

    def execute_plan(
        self,
        plan_id: str,
        auto_progress: bool = False,
    ) -> dict[str, Any]:
        """
        Report the next task of a plan and optionally start it.

        Args:
            plan_id: Plan ID.
            auto_progress: Move the current task from PENDING to
                IN_PROGRESS before returning.

        Returns:
            Dict with ``plan``, ``current_task``, ``progress`` and
            ``next_steps``. ``plan`` and ``current_task`` are None when
            the plan is unknown.
        """
        with self._lock.write():
            plan = self.plans.get(plan_id)
            if plan is None:
                logger.warning(f"Execute requested for unknown plan {plan_id}")
                return {
                    "plan": None,
                    "current_task": None,
                    "progress": PlanProgress().model_dump(),
                    "next_steps": [PLAN_NOT_FOUND],
                }

            queue = self._plan_queue(plan)
            current = queue[0] if queue else None

            if auto_progress and current and current.status == TaskStatus.PENDING:
                current = self.tasks.update(current.id, status=TaskStatus.IN_PROGRESS)

            progress = self._progress(plan)
            if (
                progress.total
                and progress.completed == progress.total
                and plan.status == PlanStatus.ACTIVE
            ):
                plan = self.plans.set_status(plan.id, PlanStatus.COMPLETED)

        if current:
            next_steps = [
                f"Execute task: {current.title}",
                f"Description: {current.description}",
            ]
        elif progress.total and progress.completed == progress.total:
            next_steps = ["All tasks completed!"]
        else:
            next_steps = ["Check task dependencies and resolve blockers"]

        return {
            "plan": plan.to_dict(),
            "current_task": current.to_dict() if current else None,
            "progress": progress.model_dump(),
            "next_steps": next_steps,
        }

    def list_plans(self) -> list[dict[str, Any]]:
        """Get every plan."""
        with self._lock.read():
            return [plan.to_dict() for plan in self.plans.all()]

    def get_plan(self, plan_id: str) -> dict[str, Any] | None:
        """Get a plan by ID, or None."""
        with self._lock.read():
            plan = self.plans.get(plan_id)
        return plan.to_dict() if plan else None

    # =========================================================================
    # TASKS
    # =========================================================================

    def get_task_status(
        self,
        task_id: str | None = None,
        plan_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Report tasks together with global statistics and queue.

        ``task_id`` takes precedence over ``plan_id``; with neither,
        every task is returned. Unknown ids yield an empty task list.

        Returns:
            Dict with ``tasks``, ``statistics`` and ``queue``.
        """
        with self._lock.read():
            all_tasks = self.tasks.all()

            if task_id:
                task = self.tasks.get(task_id)
                tasks = [task] if task else []
            elif plan_id:
                plan = self.plans.get(plan_id)
                tasks = self._plan_tasks(plan) if plan else []
            else:
                tasks = all_tasks

            statistics = self._statistics(all_tasks)
            queue = self.scheduler.order(self.resolver.frontier(all_tasks))

        return {
            "tasks": [task.to_dict() for task in tasks],
            "statistics": statistics.model_dump(),
            "queue": [task.to_dict() for task in queue],
        }

    def update_task_status(
        self,
        task_id: str,
        status: TaskStatus | str,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """
        Change a task's status and report the tasks that depend on it.

        Args:
            task_id: Task ID.
            status: New status.
            notes: Optional free-text notes stored in the task metadata.

        Returns:
            Dict with ``task``, ``affected_tasks`` and ``recommendations``.
            ``task`` is None when the task is unknown.

        Raises:
            InvalidStatusTransitionError: If the state machine forbids
                the change.
        """
        status = TaskStatus(status)

        with self._lock.write():
            current = self.tasks.get(task_id)
            if current is None:
                logger.warning(f"Status update for unknown task {task_id}")
                return {
                    "task": None,
                    "affected_tasks": [],
                    "recommendations": [TASK_NOT_FOUND],
                }

            fields: dict[str, Any] = {"status": status}
            if notes:
                fields["metadata"] = current.metadata.model_copy(update={"notes": notes})

            try:
                task = self.tasks.update(task_id, **fields)
            except InvalidStatusTransitionError:
                logger.warning(
                    f"Rejected status change for {task_id}: "
                    f"{current.status.value} -> {status.value}"
                )
                raise

            all_tasks = self.tasks.all()
            affected = self.resolver.dependents(task_id, all_tasks)
            recommendations = self._update_recommendations(
                current, task, affected, all_tasks
            )

        return {
            "task": task.to_dict(),
            "affected_tasks": [t.to_dict() for t in affected],
            "recommendations": recommendations,
        }

    def delete_task(self, task_id: str) -> bool:
        """
        Delete a task.

        Tasks depending on it keep the dangling id; they are reported
        under ``statistics["dangling"]`` and never become executable.

        Returns:
            True if deleted, False if not found.
        """
        with self._lock.write():
            return self.tasks.delete(task_id)

    # =========================================================================
    # HELPERS (caller holds the lock)
    # =========================================================================

    def _plan_tasks(self, plan: ExecutionPlan) -> list[Task]:
        tasks = (self.tasks.get(task_id) for task_id in plan.tasks)
        return [task for task in tasks if task is not None]

    def _plan_queue(self, plan: ExecutionPlan) -> list[Task]:
        plan_ids = set(plan.tasks)
        frontier = self.resolver.frontier(self.tasks.all())
        return self.scheduler.order(t for t in frontier if t.id in plan_ids)

    def _progress(self, plan: ExecutionPlan) -> PlanProgress:
        completed = sum(
            1 for task in self._plan_tasks(plan)
            if task.status == TaskStatus.COMPLETED
        )
        return PlanProgress.from_counts(completed, len(plan.tasks))

    def _statistics(self, tasks: list[Task]) -> TaskStatistics:
        stats = TaskStatistics(total=len(tasks))

        for task in tasks:
            stats.by_status[task.status.value] += 1
            stats.by_priority[task.priority.value] += 1

        stats.executable = len(self.resolver.frontier(tasks))
        stats.blocked = len(self.resolver.blocked(tasks))
        stats.dangling = self.resolver.dangling(tasks)
        return stats

    def _update_recommendations(
        self,
        before: Task,
        after: Task,
        affected: list[Task],
        all_tasks: list[Task],
    ) -> list[str]:
        recommendations: list[str] = []
        changed = before.status != after.status

        if after.status == TaskStatus.COMPLETED and changed:
            unblocked = [
                t for t in affected if self.resolver.is_executable(t, all_tasks)
            ]
            if unblocked:
                titles = ", ".join(t.title for t in unblocked)
                recommendations.append(
                    f"Task completed! {len(unblocked)} dependent task(s) "
                    f"can run now: {titles}"
                )
        elif after.status == TaskStatus.FAILED:
            recommendations.append(
                f"Task failed; inspect the {len(affected)} task(s) that depend on it"
            )
        elif after.status == TaskStatus.CANCELLED and changed and affected:
            recommendations.append(
                f"Task cancelled; {len(affected)} dependent task(s) can no longer run"
            )

        return recommendations
