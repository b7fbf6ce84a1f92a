"""
RoMod - Cases Package
=====================

Case state machine and its change events.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .events import ChangeEvent, ChangeKind, ChangePublisher, EntityType
from .service import CaseService, get_case_service, set_case_service

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "ChangePublisher",
    "EntityType",
    "CaseService",
    "get_case_service",
    "set_case_service",
]
