"""
Error response models.

Standardized error responses for the API.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    message: str
    code: Optional[str] = None
    retry_after: Optional[int] = Field(None, serialization_alias="retryAfter")
    details: Optional[dict[str, Any]] = None
    error: Optional[str] = None  # Exception text, non-production only
