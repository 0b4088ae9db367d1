"""Common schemas used across the application."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
    success: bool = True
    details: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: str
    timestamp: datetime


class FeatureFlagsResponse(BaseModel):
    """Landing page feature flags for the configured tenant."""

    tenant: str
    features: dict[str, bool]
