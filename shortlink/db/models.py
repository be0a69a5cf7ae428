"""
Database Models for URL Shortener Service

This module defines the SQLModel schemas for:
- Binding: Stores the mapping between an id and its target URL, with the
  effective expiration policy and the access counter
- BindRequest: Non-table model describing a create/update request

Design Decisions:
- The id is the primary key (caller-supplied or generated, never numeric)
- expire_on is nullable: NULL means the binding never expires by time
- max_requests of 0 means unlimited
- ttl and max_requests are bounded by MAX_POLICY_VALUE so they fit the
  INTEGER columns
- counter is incremented by the store on every counted read
"""

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String, DateTime, Integer, Text

from shortlink.core.policy import utcnow
from shortlink.core.setting import MAX_POLICY_VALUE


class Binding(SQLModel, table=True):
    """
    Main table storing id to URL bindings.

    Fields:
    - id: Unique identifier (primary key)
    - url: The target URL
    - bound_at: When the binding was first created (never updated)
    - ttl: The TTL requested at bind time, kept for inspection
    - expire_on: Effective expiration (NULL = never)
    - max_requests: Effective max-access count (0 = unlimited)
    - counter: Number of counted reads so far
    - expired_url: Redirect target once expired (empty = global default)
    - exhausted_url: Redirect target once exhausted (empty = global default)
    """
    __tablename__ = "bindings"

    id: str = Field(
        sa_column=Column(String(255), primary_key=True),
        max_length=255
    )
    url: str = Field(sa_column=Column(Text, nullable=False))
    bound_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    ttl: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    expire_on: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True, index=True)
    )
    max_requests: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    counter: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    expired_url: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))
    exhausted_url: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))


class BindRequest(SQLModel):
    """
    Request to bind a URL to an id.

    Every policy field is optional; unset fields fall back to the global
    policy when the binding is created.
    """
    url: str = Field(..., description="The target URL")
    id: str = Field(default="", description="Custom id (empty = generate one)")
    ttl: Optional[int] = Field(
        default=None, ge=0, le=MAX_POLICY_VALUE, description="Time-to-live in seconds"
    )
    expire_on: Optional[datetime] = Field(default=None, description="Explicit expiration date")
    max_requests: Optional[int] = Field(
        default=None, ge=0, le=MAX_POLICY_VALUE, description="Max number of redirects"
    )
    expired_url: str = Field(default="", description="Redirect target once expired")
    exhausted_url: str = Field(default="", description="Redirect target once exhausted")
