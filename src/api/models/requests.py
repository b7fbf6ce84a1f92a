"""
RoMod - Request Models
======================

Request bodies for the case endpoints. Shape only; the case service
owns the rules about allowed values.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field


# =============================================================================
# Bans
# =============================================================================

class IssueBanRequest(BaseModel):
    """Issue a ban or warning."""

    server_id: str = Field(description="Server the ban applies to")
    player_id: str = Field(description="Roblox user ID")
    player_name: Optional[str] = None
    kind: str = Field(description="permanent, temporary or warning")
    reason: str
    duration: Optional[Union[int, str]] = Field(
        None, description="Seconds, or a string such as '7d' or '12h'",
    )
    evidence: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class UnbanRequest(BaseModel):
    note: Optional[str] = None


# =============================================================================
# Appeals
# =============================================================================

class SubmitAppealRequest(BaseModel):
    """File an appeal on behalf of a player."""

    ban_id: str
    submitter_id: str
    text: str


class ReviewAppealRequest(BaseModel):
    decision: str = Field(description="approved or denied")
    note: Optional[str] = None


# =============================================================================
# Tickets
# =============================================================================

class CreateTicketRequest(BaseModel):
    server_id: str
    submitter_id: str
    submitter_name: Optional[str] = None
    title: str
    description: str
    category: str = "general"
    priority: str = "medium"


class TicketPriorityRequest(BaseModel):
    priority: str


# =============================================================================
# Shifts
# =============================================================================

class ShiftRequest(BaseModel):
    server_id: str
    moderator_id: Optional[str] = Field(
        None, description="Defaults to the caller",
    )


# =============================================================================
# Reports & Notes
# =============================================================================

class CreateReportRequest(BaseModel):
    server_id: str
    player_id: str
    player_name: Optional[str] = None
    reason: str
    reported_by: Optional[str] = None
    evidence: List[str] = Field(default_factory=list)


class ReviewReportRequest(BaseModel):
    decision: str = Field(description="reviewed or dismissed")
    note: Optional[str] = None


class AddNoteRequest(BaseModel):
    server_id: str
    player_id: str
    note: str
    important: bool = False


__all__ = [
    "IssueBanRequest",
    "UnbanRequest",
    "SubmitAppealRequest",
    "ReviewAppealRequest",
    "CreateTicketRequest",
    "TicketPriorityRequest",
    "ShiftRequest",
    "CreateReportRequest",
    "ReviewReportRequest",
    "AddNoteRequest",
]
