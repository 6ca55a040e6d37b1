"""Shared FastAPI dependencies."""

from functools import lru_cache

from mantras.planning.coordinator import ExecutionCoordinator


@lru_cache
def get_coordinator() -> ExecutionCoordinator:
    """Process-wide coordinator used by the API routes.

    Tests swap it out through ``app.dependency_overrides``.
    """
    return ExecutionCoordinator()
