"""
Shared response models.
"""
from pydantic import BaseModel, Field
from typing import Any, Optional


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""
    error: str = Field(..., description="Short machine-oriented error message")
    details: Optional[Any] = Field(None, description="Upstream error payload, when available")


class UploadResponse(BaseModel):
    url: str = Field(..., description="Public URL of the hosted image")
