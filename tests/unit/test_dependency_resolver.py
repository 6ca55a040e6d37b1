"""Unit tests for DependencyResolver."""

import pytest

from mantras.planning.dependency_resolver import DependencyResolver
from mantras.planning.exceptions import CircularDependencyError, DanglingDependencyError
from mantras.planning.models import Task, TaskStatus
from mantras.planning.task_store import TaskStore


def _complete(store: TaskStore, task_id: str) -> None:
    store.update(task_id, status=TaskStatus.IN_PROGRESS)
    store.update(task_id, status=TaskStatus.COMPLETED)


@pytest.fixture
def resolver() -> DependencyResolver:
    """Create a resolver."""
    return DependencyResolver()


@pytest.mark.unit
class TestFrontier:
    """Tests for frontier computation."""

    def test_roots_only_initially(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test only tasks without dependencies start in the frontier."""
        frontier = resolver.frontier(store.all())
        assert [t.id for t in frontier] == [sample_tasks[0].id]

    def test_completion_releases_sole_dependents(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test completing a task adds exactly the tasks it was holding back."""
        setup, user_model, todo_model, api = sample_tasks

        _complete(store, setup.id)
        frontier_ids = {t.id for t in resolver.frontier(store.all())}
        assert frontier_ids == {user_model.id, todo_model.id}

        _complete(store, user_model.id)
        frontier_ids = {t.id for t in resolver.frontier(store.all())}
        # api still waits on todo_model
        assert frontier_ids == {todo_model.id}

        _complete(store, todo_model.id)
        frontier_ids = {t.id for t in resolver.frontier(store.all())}
        assert frontier_ids == {api.id}

    def test_only_pending_tasks(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test in-progress tasks leave the frontier."""
        store.update(sample_tasks[0].id, status=TaskStatus.IN_PROGRESS)
        assert resolver.frontier(store.all()) == []

    def test_failed_dependency_keeps_dependents_out(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test only COMPLETED satisfies a dependency."""
        setup = sample_tasks[0]
        store.update(setup.id, status=TaskStatus.IN_PROGRESS)
        store.update(setup.id, status=TaskStatus.FAILED)

        assert resolver.frontier(store.all()) == []

    def test_frontier_property(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test membership matches the definition for every task."""
        _complete(store, sample_tasks[0].id)
        store.update(sample_tasks[2].id, status=TaskStatus.IN_PROGRESS)

        tasks = store.all()
        index = {t.id: t for t in tasks}
        frontier_ids = {t.id for t in resolver.frontier(tasks)}

        for task in tasks:
            expected = task.status == TaskStatus.PENDING and all(
                dep in index and index[dep].status == TaskStatus.COMPLETED
                for dep in task.dependencies
            )
            assert (task.id in frontier_ids) == expected

    def test_dependencies_matched_by_id_not_title(
        self, resolver: DependencyResolver
    ) -> None:
        """Test a dependency naming a title does not resolve."""
        done = Task(id="t1", title="Design", status=TaskStatus.COMPLETED)
        waiting = Task(id="t2", title="Build", dependencies=["Design"])

        assert resolver.frontier([done, waiting]) == []
        assert resolver.dangling([done, waiting]) == {"t2": ["Design"]}

    def test_is_executable(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test single-task check agrees with the frontier."""
        tasks = store.all()
        assert resolver.is_executable(tasks[0], tasks)
        assert not resolver.is_executable(tasks[1], tasks)


@pytest.mark.unit
class TestBlockedAndDangling:
    """Tests for blocked and dangling reporting."""

    def test_blocked_counts_waiting_pending_tasks(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test pending tasks outside the frontier are blocked."""
        blocked = resolver.blocked(store.all())
        assert [t.id for t in blocked] == [t.id for t in sample_tasks[1:]]

    def test_deleted_dependency_is_dangling(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test deleting a dependency makes its dependents permanently blocked."""
        setup, user_model, todo_model, _ = sample_tasks
        store.delete(setup.id)

        tasks = store.all()
        assert resolver.frontier(tasks) == []
        assert resolver.dangling(tasks) == {
            user_model.id: [setup.id],
            todo_model.id: [setup.id],
        }
        assert len(resolver.blocked(tasks)) == 3

    def test_dependents(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test dependents lists direct dependents only."""
        setup = sample_tasks[0]
        assert len(resolver.dependents(setup.id, store.all())) == 2


@pytest.mark.unit
class TestValidation:
    """Tests for graph validation."""

    def test_detect_cycles(self, resolver: DependencyResolver) -> None:
        """Test cycle detection."""
        cycles = resolver.detect_cycles({"a": ["c"], "b": ["a"], "c": ["b"]})

        assert cycles is not None
        assert cycles[0][0] == cycles[0][-1]

    def test_no_cycles(self, resolver: DependencyResolver) -> None:
        """Test an acyclic graph."""
        assert resolver.detect_cycles({"a": [], "b": ["a"], "c": ["a", "b"]}) is None

    def test_validate_raises_on_dangling(self, resolver: DependencyResolver) -> None:
        """Test validate reports unresolved ids."""
        tasks = [Task(id="a", title="A", dependencies=["ghost"])]

        with pytest.raises(DanglingDependencyError) as exc_info:
            resolver.validate(tasks)

        assert exc_info.value.task_id == "a"
        assert exc_info.value.missing == ["ghost"]

    def test_validate_raises_on_cycle(self, resolver: DependencyResolver) -> None:
        """Test validate reports cycles."""
        tasks = [
            Task(id="a", title="A", dependencies=["b"]),
            Task(id="b", title="B", dependencies=["a"]),
        ]

        with pytest.raises(CircularDependencyError):
            resolver.validate(tasks)

    def test_validate_accepts_stored_graph(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test a graph built through the store is valid."""
        resolver.validate(store.all())


@pytest.mark.unit
class TestCriticalPath:
    """Tests for critical path calculation."""

    def test_longest_chain(
        self, resolver: DependencyResolver, sample_tasks: list, store: TaskStore
    ) -> None:
        """Test the critical path runs from the root to the deepest task."""
        setup, user_model, _, api = sample_tasks
        path = resolver.critical_path(store.all())

        assert len(path) == 3
        assert path[0] == setup.id
        assert path[-1] == api.id
        assert path[1] in {user_model.id, sample_tasks[2].id}

    def test_empty(self, resolver: DependencyResolver) -> None:
        """Test an empty graph has no critical path."""
        assert resolver.critical_path([]) == []
