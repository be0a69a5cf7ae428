"""
API Request and Response Schemas

This module defines the Pydantic models for API responses.
The request body of the bind endpoint is the BindRequest model itself,
shared with the services (see shortlink.db.models).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from shortlink.db.models import BindRequest

__all__ = [
    "BindRequest",
    "BindResponse",
    "BindingInfoResponse",
    "ImportResponse",
]


class BindResponse(BaseModel):
    """Response model for the bind endpoint."""
    id: str = Field(..., description="The bound id")
    short_url: str = Field(..., description="The complete short URL")


class BindingInfoResponse(BaseModel):
    """Response model for the binding inspection endpoint."""
    id: str
    url: str
    bound_at: datetime
    ttl: int
    expire_on: Optional[datetime]
    max_requests: int
    counter: int
    expired_url: str
    exhausted_url: str


class ImportResponse(BaseModel):
    """Response model for the import endpoint."""
    rows: int = Field(..., description="Number of rows imported")
    detail: Optional[str] = Field(default=None, description="Error that stopped the import")
