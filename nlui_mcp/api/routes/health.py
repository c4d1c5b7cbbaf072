"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from nlui_mcp.models.schemas import HealthStatus

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request) -> HealthStatus:
    """Basic health check endpoint."""
    store = request.app.state.instance_store
    sweeping = store.sweep_task is not None and not store.sweep_task.done()

    return HealthStatus(
        status="healthy" if sweeping else "degraded",
        version=request.app.state.settings.app_version,
        timestamp=datetime.now(timezone.utc),
        stored_instances=len(store),
        checks=["instance_store", "sweep_task"],
    )
