"""Standard response models for API documentation.

Provides Pydantic models that appear in OpenAPI/Swagger docs
for consistent response schemas.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Success envelope: ``{"data": ...}``."""

    data: T


class ErrorContent(BaseModel):
    """Error information container."""

    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Additional error context",
    )
    request_id: Optional[str] = Field(
        default=None,
        alias="requestId",
        description="Correlation id echoed in the x-request-id header",
    )


class ErrorResponse(BaseModel):
    """Standard error response format.

    Example:
        {
            "error": {
                "code": "FORBIDDEN",
                "message": "You do not own this closet item",
                "requestId": "5f0c..."
            }
        }
    """

    error: ErrorContent = Field(description="Error information")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": {
                        "code": "ITEMS_NOT_FOUND",
                        "message": "Some closet items do not exist",
                        "details": {"requested": 3, "found": 2},
                        "requestId": "5f0c2d1e9b7a4c3d",
                    }
                },
                {
                    "error": {
                        "code": "BAD_REQUEST",
                        "message": "Request validation failed",
                        "details": {
                            "errors": [
                                {
                                    "field": "body.occasion",
                                    "message": "Field required",
                                    "type": "missing",
                                }
                            ]
                        },
                        "requestId": "5f0c2d1e9b7a4c3d",
                    }
                },
            ]
        }
    }


# Shared OpenAPI error documentation for routers
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}
