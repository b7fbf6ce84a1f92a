"""
RoMod - API Models
==================

Pydantic models for request/response validation.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .base import *
from .requests import *


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # base.py
    "APIResponse",
    "PaginatedResponse",
    "PaginationMeta",
    "HealthResponse",
    "WSMessage",
    "WSEventType",
    # requests.py
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
