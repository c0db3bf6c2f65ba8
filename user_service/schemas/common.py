"""Common Pydantic schemas."""
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with camelCase wire names."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ErrorResponse(BaseSchema):
    """Error response schema."""

    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, alias="error_code", description="Error code")
    details: Dict[str, Any] = Field(default_factory=dict, description="Error details")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SuccessResponse(BaseSchema):
    """Generic success response."""

    success: bool = Field(True, description="Success status")
    message: str = Field(..., description="Success message")


class HealthResponse(BaseSchema):
    """Health check response."""

    status: str = Field(..., description="Overall health status")
    service: str = Field(..., description="Service name")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    services: Dict[str, str] = Field(
        default_factory=dict,
        description="Dependency health statuses"
    )
