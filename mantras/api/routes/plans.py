"""
Plans API Routes.

Create and advance execution plans.
"""

from __future__ import annotations

from functools import partial
from typing import Any

import anyio.to_thread
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from mantras.api.dependencies import get_coordinator
from mantras.core.config import Settings, get_settings
from mantras.planning.coordinator import ExecutionCoordinator

router = APIRouter()


# ============================================================================
# Request Models
# ============================================================================


class PlanCreate(BaseModel):
    """Plan creation request model."""

    request: str = Field(..., min_length=1, description="Free-text request")
    auto_decompose: bool | None = Field(
        default=None,
        description="Split into a task chain (defaults to settings)",
    )


class PlanExecute(BaseModel):
    """Plan execution request model."""

    auto_progress: bool = False


# ============================================================================
# Routes
# ============================================================================


@router.post("/", status_code=201, response_model=dict[str, Any])
async def create_plan(
    body: PlanCreate,
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Create an execution plan from a request.

    Args:
        body: Request text and decomposition flag.

    Returns:
        Plan, its tasks, recommendations and next actions.

    Raises:
        HTTPException: 422 if the request is blank.
    """
    auto_decompose = (
        settings.mantras_default_auto_decompose
        if body.auto_decompose is None
        else body.auto_decompose
    )
    try:
        return await anyio.to_thread.run_sync(
            partial(
                coordinator.create_execution_plan,
                body.request,
                auto_decompose=auto_decompose,
            )
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.get("/", response_model=list[dict[str, Any]])
async def list_plans(
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
) -> list[dict[str, Any]]:
    """
    List all plans.
    """
    return await anyio.to_thread.run_sync(coordinator.list_plans)


@router.get("/{plan_id}", response_model=dict[str, Any])
async def get_plan(
    plan_id: str,
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    """
    Get single plan by ID.

    Raises:
        HTTPException: If plan not found.
    """
    plan = await anyio.to_thread.run_sync(coordinator.get_plan, plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


@router.post("/{plan_id}/execute", response_model=dict[str, Any])
async def execute_plan(
    plan_id: str,
    body: PlanExecute | None = None,
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    """
    Report the current task of a plan, optionally starting it.

    Args:
        plan_id: The plan ID.
        body: Optional auto-progress flag.

    Returns:
        Plan, current task, progress and next steps.

    Raises:
        HTTPException: If plan not found.
    """
    auto_progress = body.auto_progress if body else False
    result = await anyio.to_thread.run_sync(
        partial(coordinator.execute_plan, plan_id, auto_progress=auto_progress)
    )
    if result["plan"] is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return result
