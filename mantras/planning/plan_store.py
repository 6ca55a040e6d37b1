"""In-memory execution plan store."""

from loguru import logger

from mantras.planning.exceptions import PlanNotFoundError
from mantras.planning.models import ExecutionPlan, PlanMetadata, PlanStatus, utc_now


class PlanStore:
    """
    Id-indexed registry of execution plans.

    Plans hold task ids only; the tasks themselves live in the TaskStore.
    A plan's task list is fixed at creation.

    Example:
        >>> plans = PlanStore()
        >>> plan = plans.create("Fix login", "Fix the login bug", [t.id for t in tasks])
        >>> plans.get(plan.id).status
        <PlanStatus.ACTIVE: 'active'>
    """

    def __init__(self) -> None:
        self._plans: dict[str, ExecutionPlan] = {}

    def __len__(self) -> int:
        return len(self._plans)

    def create(
        self,
        title: str,
        description: str,
        tasks: list[str],
        status: PlanStatus = PlanStatus.ACTIVE,
        metadata: PlanMetadata | None = None,
    ) -> ExecutionPlan:
        """
        Store a new plan.

        Args:
            title: Plan title.
            description: Plan description.
            tasks: Ordered task ids owned by the plan.
            status: Initial status.
            metadata: How the plan was produced.

        Returns:
            The stored plan.
        """
        now = utc_now()
        plan = ExecutionPlan(
            title=title,
            description=description,
            tasks=list(tasks),
            status=status,
            created_at=now,
            updated_at=now,
            metadata=metadata or PlanMetadata(),
        )
        self._plans[plan.id] = plan
        logger.info(f"Created plan {plan.id} with {len(plan.tasks)} tasks")
        return plan.model_copy(deep=True)

    def get(self, plan_id: str) -> ExecutionPlan | None:
        """Get a plan by ID."""
        plan = self._plans.get(plan_id)
        return plan.model_copy(deep=True) if plan else None

    def require(self, plan_id: str) -> ExecutionPlan:
        """
        Get a plan by ID or raise.

        Raises:
            PlanNotFoundError: If the plan is not found.
        """
        plan = self.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan

    def all(self) -> list[ExecutionPlan]:
        """Get all plans in creation order."""
        return [plan.model_copy(deep=True) for plan in self._plans.values()]

    def set_status(self, plan_id: str, status: PlanStatus) -> ExecutionPlan | None:
        """
        Change a plan's status.

        Returns:
            The updated plan, or None if the plan is not found.
        """
        plan = self._plans.get(plan_id)
        if plan is None:
            return None
        if plan.status != status:
            logger.info(f"Plan {plan_id} {plan.status.value} -> {status.value}")
            plan.status = status
            plan.updated_at = utc_now()
        return plan.model_copy(deep=True)

    def delete(self, plan_id: str) -> bool:
        """
        Delete a plan. Its tasks stay in the TaskStore.

        Returns:
            True if deleted, False if not found.
        """
        return self._plans.pop(plan_id, None) is not None
