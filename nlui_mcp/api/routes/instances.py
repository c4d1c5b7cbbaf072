"""
Instance Routes
===============

FastAPI routes serving stored UI descriptions to the browser renderer.
"""

from typing import Any, Dict
import uuid

from fastapi import APIRouter, Depends, Request

from nlui_mcp.config.logging import get_logger
from nlui_mcp.core.errors import ErrorHandler, InternalError
from nlui_mcp.core.storage import InstanceStore

logger = get_logger(__name__)

router = APIRouter(
    prefix="/instances",
    tags=["Instances"],
    responses={404: {"description": "Instance not found"}},
)


def get_instance_store(request: Request) -> InstanceStore:
    """Dependency to get the application instance store."""
    return request.app.state.instance_store


@router.get("/")
async def get_instance_without_id() -> Dict[str, Any]:
    """Reject lookups without an instance id."""
    logger.warning("Missing instanceId parameter")
    raise ErrorHandler.create_validation_error("Missing instanceId parameter", field="instanceId")


@router.get("/{instance_id}")
async def get_instance(
    instance_id: str, store: InstanceStore = Depends(get_instance_store)
) -> Dict[str, Any]:
    """
    Get a stored UI description.

    Args:
        instance_id: Identifier returned by the ui-render tool

    Returns:
        The stored NLUI document
    """
    try:
        uuid.UUID(instance_id)
    except ValueError:
        logger.warning("Malformed instanceId parameter", instance_id=instance_id)
        raise ErrorHandler.create_validation_error(
            "Malformed instanceId parameter", field="instanceId"
        )

    try:
        payload = store.get(instance_id)
    except Exception as e:
        logger.error("Error retrieving instance", instance_id=instance_id, error=str(e), exc_info=True)
        raise InternalError("Error retrieving instance", original_error=e) from e

    if payload is None:
        logger.warning("Instance not found", instance_id=instance_id)
        raise ErrorHandler.create_not_found_error(instance_id)

    return payload
