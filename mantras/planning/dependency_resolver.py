"""Dependency resolver - computes the executable frontier of a task graph.

Dependencies are matched strictly by task id. A dependency id that does
not resolve to a stored task keeps its owner out of the frontier for
good and is reported as dangling, never dropped.
"""

from collections.abc import Iterable

from loguru import logger

from mantras.planning.exceptions import CircularDependencyError, DanglingDependencyError
from mantras.planning.models import Task, TaskStatus


class DependencyResolver:
    """
    Resolve task dependencies against current task state.

    The resolver is stateless: every method takes the full task list and
    recomputes from scratch, so the answer always reflects the latest
    status of every task.

    Example:
        >>> resolver = DependencyResolver()
        >>> [t.title for t in resolver.frontier(tasks)]
        ['问题分析']
        >>> resolver.dangling(tasks)
        {}
    """

    # =========================================================================
    # FRONTIER
    # =========================================================================

    def frontier(self, tasks: Iterable[Task]) -> list[Task]:
        """
        Get every task that can start right now.

        A task is executable when it is PENDING and each of its
        dependency ids names a COMPLETED task.

        Args:
            tasks: All known tasks.

        Returns:
            Executable tasks, in input order.
        """
        tasks = list(tasks)
        index = {task.id: task for task in tasks}
        ready = [task for task in tasks if self._is_executable(task, index)]

        logger.debug(f"Frontier has {len(ready)} of {len(tasks)} tasks")
        return ready

    def is_executable(self, task: Task, tasks: Iterable[Task]) -> bool:
        """
        Check if a single task is in the frontier.

        Args:
            task: Task to check.
            tasks: All known tasks.

        Returns:
            True if the task is PENDING with all dependencies completed.
        """
        return self._is_executable(task, {t.id: t for t in tasks})

    def blocked(self, tasks: Iterable[Task]) -> list[Task]:
        """
        Get PENDING tasks that are not executable.

        This covers tasks waiting on unfinished dependencies as well as
        tasks with dangling dependencies.

        Args:
            tasks: All known tasks.

        Returns:
            Blocked tasks, in input order.
        """
        tasks = list(tasks)
        index = {task.id: task for task in tasks}
        return [
            task for task in tasks
            if task.status == TaskStatus.PENDING
            and not self._is_executable(task, index)
        ]

    def dangling(self, tasks: Iterable[Task]) -> dict[str, list[str]]:
        """
        Find dependency ids that do not resolve to any task.

        Args:
            tasks: All known tasks.

        Returns:
            Mapping of task ID -> missing dependency IDs. Tasks without
            dangling dependencies are omitted.
        """
        tasks = list(tasks)
        known = {task.id for task in tasks}
        missing: dict[str, list[str]] = {}

        for task in tasks:
            unknown = [dep for dep in task.dependencies if dep not in known]
            if unknown:
                missing[task.id] = unknown

        if missing:
            logger.warning(f"{len(missing)} tasks have dangling dependencies")
        return missing

    def dependents(self, task_id: str, tasks: Iterable[Task]) -> list[Task]:
        """
        Get tasks that list ``task_id`` among their dependencies.

        Args:
            task_id: Task identifier.
            tasks: All known tasks.

        Returns:
            Direct dependents, in input order.
        """
        return [task for task in tasks if task_id in task.dependencies]

    @staticmethod
    def _is_executable(task: Task, index: dict[str, Task]) -> bool:
        if task.status != TaskStatus.PENDING:
            return False
        for dep_id in task.dependencies:
            dep = index.get(dep_id)
            if dep is None or dep.status != TaskStatus.COMPLETED:
                return False
        return True

    # =========================================================================
    # GRAPH VALIDATION
    # =========================================================================

    def build_graph(self, tasks: Iterable[Task]) -> dict[str, list[str]]:
        """
        Build a dependency graph from tasks.

        Args:
            tasks: Tasks with dependencies.

        Returns:
            Dictionary mapping task_id -> list of dependency task_ids.
        """
        return {task.id: list(task.dependencies) for task in tasks}

    def detect_cycles(
        self,
        graph: dict[str, list[str]],
    ) -> list[list[str]] | None:
        """
        Detect cycles in the dependency graph using DFS.

        Args:
            graph: Dependency graph (task_id -> [dependency_ids]).

        Returns:
            List of cycle paths if found, None otherwise.

        Example:
            >>> cycles = resolver.detect_cycles({"a": ["b"], "b": ["a"]})
            >>> cycles[0]
            ['a', 'b', 'a']
        """
        WHITE, GRAY, BLACK = 0, 1, 2
        colors: dict[str, int] = {node: WHITE for node in graph}
        cycles: list[list[str]] = []

        def dfs(node: str, path: list[str]) -> bool:
            colors[node] = GRAY
            path.append(node)

            for neighbor in graph.get(node, []):
                if neighbor not in colors:
                    continue  # Dangling, reported separately
                if colors[neighbor] == GRAY:
                    cycle_start = path.index(neighbor)
                    cycles.append(path[cycle_start:] + [neighbor])
                    return True
                if colors[neighbor] == WHITE and dfs(neighbor, path):
                    return True

            path.pop()
            colors[node] = BLACK
            return False

        for node in graph:
            if colors[node] == WHITE:
                dfs(node, [])

        return cycles if cycles else None

    def validate(self, tasks: Iterable[Task]) -> None:
        """
        Check the graph for dangling dependencies and cycles.

        Args:
            tasks: All known tasks.

        Raises:
            DanglingDependencyError: If a dependency id resolves to nothing.
            CircularDependencyError: If dependencies form a cycle.
        """
        tasks = list(tasks)

        for task_id, missing in self.dangling(tasks).items():
            raise DanglingDependencyError(task_id, missing)

        cycles = self.detect_cycles(self.build_graph(tasks))
        if cycles:
            raise CircularDependencyError(cycles[0])

    # =========================================================================
    # CRITICAL PATH
    # =========================================================================

    def critical_path(self, tasks: Iterable[Task]) -> list[str]:
        """
        Find the longest dependency chain through the task graph.

        Args:
            tasks: Tasks forming an acyclic graph.

        Returns:
            Task ids on the critical path, first-to-run first.
        """
        graph = self.build_graph(tasks)
        depths: dict[str, int] = {}

        def get_depth(task_id: str) -> int:
            if task_id in depths:
                return depths[task_id]

            valid_deps = [d for d in graph.get(task_id, []) if d in graph]
            depths[task_id] = (
                1 + max(get_depth(d) for d in valid_deps) if valid_deps else 0
            )
            return depths[task_id]

        for task_id in graph:
            get_depth(task_id)

        if not depths:
            return []

        current = max(depths, key=lambda k: depths[k])
        path = [current]

        while True:
            deps = [d for d in graph[current] if d in depths]
            if not deps:
                break
            current = max(deps, key=lambda d: depths[d])
            path.append(current)

        return list(reversed(path))
