"""Pytest configuration and shared fixtures."""

import os
from typing import Generator

import pytest

# Set test environment
os.environ.setdefault("MANTRAS_DEBUG", "true")
os.environ.setdefault("MANTRAS_LOG_LEVEL", "DEBUG")


@pytest.fixture
def mock_settings() -> Generator:
    """Reset cached settings around a test."""
    from mantras.core.config import clear_settings_cache

    # Clear any cached settings
    clear_settings_cache()

    yield

    # Clear again after test
    clear_settings_cache()


@pytest.fixture
def store():
    """Provide an empty task store."""
    from mantras.planning.task_store import TaskStore

    return TaskStore()


@pytest.fixture
def coordinator():
    """Provide a coordinator with fresh stores."""
    from mantras.planning.coordinator import ExecutionCoordinator

    return ExecutionCoordinator()


@pytest.fixture
def sample_tasks(store) -> list:
    """Provide a small stored task graph.

    task-1 -> task-2 -> task-4
    task-1 -> task-3 -> task-4
    """
    from mantras.planning.models import TaskDraft, TaskPriority

    setup = store.create(
        TaskDraft(title="Initialize project", priority=TaskPriority.HIGH)
    )
    user_model = store.create(
        TaskDraft(
            title="Create User model",
            priority=TaskPriority.MEDIUM,
            dependencies=[setup.id],
        )
    )
    todo_model = store.create(
        TaskDraft(
            title="Create Todo model",
            priority=TaskPriority.URGENT,
            dependencies=[setup.id],
        )
    )
    api = store.create(
        TaskDraft(
            title="Create API endpoints",
            priority=TaskPriority.LOW,
            dependencies=[user_model.id, todo_model.id],
        )
    )
    return [setup, user_model, todo_model, api]


@pytest.fixture
def debugging_request() -> str:
    """Provide a request that selects the debugging template."""
    return "调试JavaScript性能问题"


@pytest.fixture
def implementation_request() -> str:
    """Provide a request that selects the implementation template."""
    return "实现用户认证系统"


# Markers
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
