"""
Pydantic Models and Schemas
===========================

Core data models for NLUI documents, stored instances, decoded protocol
events and API responses.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# NLUI Models
class NLUIProps(BaseModel):
    """
    Top-level UI description accepted by the ui-render tool.

    The block tree is a recursive layout of typed components; its inner
    structure belongs to the browser-side renderer and is not checked here.
    """

    block: Dict[str, Any] = Field(
        ..., description="Root layout block, e.g. {\"main\": {\"kind\": \"card\", ...}}"
    )
    showTools: Optional[bool] = Field(None, description="Show the renderer tool bar")
    showDebug: Optional[bool] = Field(None, description="Show the renderer debug panel")

    model_config = ConfigDict(extra="allow")


class StoredInstance(BaseModel):
    """A UI description held by the instance store."""

    id: str = Field(..., description="Opaque instance identifier")
    payload: Dict[str, Any] = Field(..., description="Stored NLUI document")
    created_at: float = Field(..., description="Creation time as a UNIX timestamp")

    model_config = ConfigDict(frozen=True)


# Protocol Models
class NormalizedEvent(BaseModel):
    """One decoded protocol event."""

    event: str = Field(default="message", description="SSE event name")
    data: Any = Field(None, description="JSON-decoded data, or the raw string")


# Response Models
class ToolErrorPayload(BaseModel):
    """Error body returned to the calling agent as a tool result."""

    success: bool = False
    error_type: str
    error: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Error details")
    request_id: Optional[str] = Field(None, description="Request identifier")


class HealthStatus(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(..., description="Check time")
    stored_instances: int = Field(..., ge=0, description="Number of live stored instances")
    checks: List[str] = Field(default_factory=list, description="Checks that ran")
