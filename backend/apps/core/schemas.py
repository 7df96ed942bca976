"""
Core schemas - shared Pydantic models for API responses.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    detail: str = Field(..., description="Human-readable error message")

    model_config = {"json_schema_extra": {"example": {"detail": "Case not found."}}}


class MessageResponse(BaseModel):
    """Simple success acknowledgement."""

    success: bool = True
    message: str
