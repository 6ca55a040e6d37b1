"""
Tasks API Routes.

Query task status and apply status updates.
"""

from __future__ import annotations

from functools import partial
from typing import Any

import anyio.to_thread
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel

from mantras.api.dependencies import get_coordinator
from mantras.planning.coordinator import ExecutionCoordinator
from mantras.planning.exceptions import InvalidStatusTransitionError
from mantras.planning.models import TaskStatus

router = APIRouter()


# ============================================================================
# Request Models
# ============================================================================


class TaskStatusUpdate(BaseModel):
    """Task status update request model."""

    status: TaskStatus
    notes: str | None = None


# ============================================================================
# Routes
# ============================================================================


@router.get("/", response_model=dict[str, Any])
async def get_task_status(
    task_id: str | None = Query(None, description="Return only this task"),
    plan_id: str | None = Query(None, description="Return only this plan's tasks"),
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    """
    Get tasks with global statistics and the execution queue.

    Args:
        task_id: Optional task filter, takes precedence.
        plan_id: Optional plan filter.

    Returns:
        Tasks, statistics and queue.
    """
    return await anyio.to_thread.run_sync(
        partial(coordinator.get_task_status, task_id=task_id, plan_id=plan_id)
    )


@router.patch("/{task_id}/status", response_model=dict[str, Any])
async def update_task_status(
    task_id: str,
    body: TaskStatusUpdate,
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    """
    Change a task's status.

    Args:
        task_id: The task ID.
        body: New status and optional notes.

    Returns:
        Updated task, affected dependents and recommendations.

    Raises:
        HTTPException: 404 if task not found, 409 if the transition is
            not allowed.
    """
    try:
        result = await anyio.to_thread.run_sync(
            partial(
                coordinator.update_task_status,
                task_id,
                body.status,
                notes=body.notes,
            )
        )
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    if result["task"] is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return result


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
) -> Response:
    """
    Delete a task.

    Raises:
        HTTPException: If task not found.
    """
    deleted = await anyio.to_thread.run_sync(coordinator.delete_task, task_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=204)
