"""
RoMod - Database Module
=======================

Case store: SQLite persistence for bans, appeals, tickets, shifts,
reports, moderator notes, moderation logs and server settings.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from src.core.database.manager import (
    DatabaseManager,
    get_db,
    DATA_DIR,
    DB_PATH,
)
from src.core.database.base import _safe_json_loads, is_ban_active

from src.core.database.models import (
    BanRecord,
    AppealRecord,
    TicketRecord,
    ShiftMetrics,
    ShiftRecord,
    ReportRecord,
    NoteRecord,
    ModLogRecord,
)

__all__ = [
    # Main interface
    "DatabaseManager",
    "get_db",

    # Helpers
    "_safe_json_loads",
    "is_ban_active",
    "DATA_DIR",
    "DB_PATH",

    # Type definitions
    "BanRecord",
    "AppealRecord",
    "TicketRecord",
    "ShiftMetrics",
    "ShiftRecord",
    "ReportRecord",
    "NoteRecord",
    "ModLogRecord",
]
