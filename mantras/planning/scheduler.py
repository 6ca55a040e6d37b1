"""Scheduler - orders executable tasks into a priority queue."""

from collections.abc import Iterable

from loguru import logger

from mantras.planning.models import Task


class Scheduler:
    """
    Order tasks by priority, then by creation time.

    URGENT runs before HIGH, HIGH before MEDIUM, MEDIUM before LOW.
    Equal priorities run oldest first. The sort is stable, so tasks with
    identical priority and timestamp keep their input (store insertion)
    order and the result is reproducible.

    The queue is never cached; callers recompute it on every query.

    Example:
        >>> scheduler = Scheduler()
        >>> [t.priority.value for t in scheduler.order(frontier)]
        ['urgent', 'medium', 'low']
    """

    def order(self, tasks: Iterable[Task]) -> list[Task]:
        """
        Sort tasks into execution order.

        Args:
            tasks: Typically the frontier.

        Returns:
            New list, highest priority first.
        """
        queue = sorted(tasks, key=self.sort_key)
        logger.debug(f"Queue ordered: {[t.id for t in queue]}")
        return queue

    def next(self, tasks: Iterable[Task]) -> Task | None:
        """Get the task that should run next, if any."""
        queue = self.order(tasks)
        return queue[0] if queue else None

    @staticmethod
    def sort_key(task: Task) -> tuple[int, float]:
        return (-task.priority.rank, task.created_at.timestamp())
