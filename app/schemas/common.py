"""
Common Schemas
==============

Shared Pydantic models describing the API response envelope.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success response format"""

    ok: bool = Field(default=True, description="Request success status")
    data: T = Field(..., description="Response data")
    error: None = Field(default=None, description="Always null on success")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": True,
                "data": {"area_id": 1, "name": "Backyard Garden"},
                "error": None,
            }
        }
    )


class ErrorDetail(BaseModel):
    message: str
    timestamp: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format"""

    ok: bool = Field(default=False, description="Request success status")
    data: Any | None = Field(default=None, description="Data (null on error)")
    error: ErrorDetail = Field(..., description="Error message and timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": False,
                "data": None,
                "error": {"message": "Area not found", "timestamp": "2025-10-18T08:00:00+00:00"},
            }
        }
    )
