"""
RoMod - Database Type Definitions
=================================

TypedDict definitions for database records.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, Dict, List, Optional, TypedDict


class BanRecord(TypedDict, total=False):
    """Type for ban records returned from database."""
    id: str
    server_id: str
    player_id: str
    player_name: Optional[str]
    reason: str
    kind: str
    issued_by: str
    issued_at: float
    expires_at: Optional[float]
    active: bool
    evidence: List[str]
    metadata: Dict[str, Any]
    deactivated_at: Optional[float]
    deactivated_by: Optional[str]
    deactivation_reason: Optional[str]
    unban_note: Optional[str]
    relay_status: str
    relay_error: Optional[str]
    updated_at: float


class AppealRecord(TypedDict, total=False):
    """Type for appeal records."""
    id: str
    ban_id: str
    server_id: str
    submitter_id: str
    text: str
    status: str
    reviewed_by: Optional[str]
    review_note: Optional[str]
    reviewed_at: Optional[float]
    created_at: float


class TicketRecord(TypedDict, total=False):
    """Type for support ticket records."""
    id: str
    server_id: str
    submitter_id: str
    submitter_name: Optional[str]
    title: str
    description: str
    category: str
    status: str
    priority: str
    assigned_to: Optional[str]
    closed_by: Optional[str]
    closed_at: Optional[float]
    created_at: float
    updated_at: float


class ShiftMetrics(TypedDict):
    """Per-shift action counters."""
    actions_count: int
    bans_issued: int
    appeals_reviewed: int
    tickets_handled: int
    reports_processed: int


class ShiftRecord(TypedDict, total=False):
    """Type for moderator shift records."""
    id: str
    server_id: str
    moderator_id: str
    start_time: float
    end_time: Optional[float]
    status: str
    metrics: ShiftMetrics


class ReportRecord(TypedDict, total=False):
    """Type for player report records."""
    id: str
    server_id: str
    player_id: str
    player_name: Optional[str]
    reason: str
    reported_by: str
    evidence: List[str]
    status: str
    reviewed_by: Optional[str]
    review_note: Optional[str]
    reviewed_at: Optional[float]
    created_at: float


class NoteRecord(TypedDict, total=False):
    """Type for moderator note records."""
    id: str
    server_id: str
    player_id: str
    author_id: str
    note: str
    is_important: bool
    created_at: float


class ModLogRecord(TypedDict, total=False):
    """Type for moderation audit log records."""
    id: int
    server_id: str
    moderator_id: str
    shift_id: Optional[str]
    action: str
    target_type: Optional[str]
    target_id: Optional[str]
    details: Dict[str, Any]
    created_at: float


__all__ = [
    "BanRecord",
    "AppealRecord",
    "TicketRecord",
    "ShiftMetrics",
    "ShiftRecord",
    "ReportRecord",
    "NoteRecord",
    "ModLogRecord",
]
