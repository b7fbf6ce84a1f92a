"""
RoMod - Base API Models
=======================

Common response models and utilities.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel, Field


# =============================================================================
# Generic Type Variables
# =============================================================================

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Base Response Models
# =============================================================================

class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class PaginationMeta(BaseModel):
    """Pagination metadata."""

    page: int = Field(ge=1, description="Current page number")
    per_page: int = Field(ge=1, description="Items per page")
    total: int = Field(ge=0, description="Total number of items")
    total_pages: int = Field(ge=0, description="Total number of pages")
    has_next: bool = Field(description="Whether there is a next page")
    has_prev: bool = Field(description="Whether there is a previous page")


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated list response."""

    success: bool = True
    data: list[T]
    pagination: PaginationMeta
    timestamp: datetime = Field(default_factory=_utcnow)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    service: str = "RoMod"
    database: bool
    websocket_connections: int = 0
    relay_pending: int = 0
    timestamp: datetime = Field(default_factory=_utcnow)
    system: Optional[dict[str, Any]] = None


# =============================================================================
# WebSocket Models
# =============================================================================

class WSMessage(BaseModel):
    """WebSocket message format."""

    type: str = Field(description="Event type")
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_utcnow)


class WSEventType:
    """WebSocket event type constants."""

    # Connection events
    CONNECTED = "connected"
    HEARTBEAT = "heartbeat"
    PONG = "pong"

    # Subscription events
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"

    # Errors
    ERROR = "error"

    # Case events
    CASE_CHANGED = "case.changed"


__all__ = [
    "APIResponse",
    "PaginatedResponse",
    "PaginationMeta",
    "HealthResponse",
    "WSMessage",
    "WSEventType",
]
