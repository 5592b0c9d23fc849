"""
Common Schemas
==============

Shared Pydantic models describing the JSON envelope every API route returns.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    message: str = Field(..., description="User-facing error message")
    timestamp: str = Field(..., description="ISO 8601 UTC time of the error")
    details: Any | None = Field(default=None, description="Validation errors or structured context")


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success response format"""

    ok: bool = Field(default=True, description="Request success status")
    data: T = Field(..., description="Response data")
    error: None = Field(default=None, description="Always null on success")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": True,
                "data": {"scanned": 5, "updated": 1, "exhausted": False, "cursor": 42},
                "error": None,
            }
        }
    )


class ErrorResponse(BaseModel):
    """Standard error response format"""

    ok: bool = Field(default=False, description="Request success status")
    data: None = Field(default=None, description="Always null on error")
    error: ErrorDetail

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": False,
                "data": None,
                "error": {"message": "Invalid request", "timestamp": "2024-05-01T09:00:00+00:00"},
            }
        }
    )
