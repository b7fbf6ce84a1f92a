"""
RoMod - Database Helpers
========================

Row conversion and id helpers shared by the database mixins.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import json
import sqlite3
import time
import uuid
from typing import Any, Iterable, List, Optional, Tuple

from src.core.logger import logger
from src.core.database.models import (
    BanRecord,
    ReportRecord,
    NoteRecord,
    ShiftRecord,
    ModLogRecord,
)


# =============================================================================
# Helper Functions
# =============================================================================

def _safe_json_loads(value: Optional[str], default: Any = None) -> Any:
    """Safely parse JSON, returning default on error."""
    if not value:
        return default if default is not None else []
    try:
        return json.loads(value)
    except (json.JSONDecodeError, ValueError):
        logger.warning(f"Corrupted JSON in database: {value[:50] if len(value) > 50 else value}")
        return default if default is not None else []


def new_id() -> str:
    """Opaque record id."""
    return str(uuid.uuid4())


def now() -> float:
    return time.time()


def in_clause(values: Iterable[Any]) -> Tuple[str, List[Any]]:
    """Build "(?, ?, ?)" plus params for an IN filter."""
    params = list(values)
    return "(" + ", ".join("?" for _ in params) + ")", params


def is_ban_active(ban: BanRecord, at: Optional[float] = None) -> bool:
    """Stored flag set and not past expiry."""
    if not ban.get("active"):
        return False
    expires_at = ban.get("expires_at")
    return expires_at is None or expires_at > (at if at is not None else time.time())


# =============================================================================
# Row Conversion
# =============================================================================

def ban_from_row(row: sqlite3.Row) -> BanRecord:
    ban = dict(row)
    ban["active"] = bool(ban["active"])
    ban["evidence"] = _safe_json_loads(ban.get("evidence"), [])
    ban["metadata"] = _safe_json_loads(ban.get("metadata"), {})
    return ban


def report_from_row(row: sqlite3.Row) -> ReportRecord:
    report = dict(row)
    report["evidence"] = _safe_json_loads(report.get("evidence"), [])
    return report


def note_from_row(row: sqlite3.Row) -> NoteRecord:
    note = dict(row)
    note["is_important"] = bool(note["is_important"])
    return note


def shift_from_row(row: sqlite3.Row) -> ShiftRecord:
    data = dict(row)
    return {
        "id": data["id"],
        "server_id": data["server_id"],
        "moderator_id": data["moderator_id"],
        "start_time": data["start_time"],
        "end_time": data["end_time"],
        "status": data["status"],
        "metrics": {
            "actions_count": data["actions_count"],
            "bans_issued": data["bans_issued"],
            "appeals_reviewed": data["appeals_reviewed"],
            "tickets_handled": data["tickets_handled"],
            "reports_processed": data["reports_processed"],
        },
    }


def mod_log_from_row(row: sqlite3.Row) -> ModLogRecord:
    entry = dict(row)
    entry["details"] = _safe_json_loads(entry.get("details"), {})
    return entry


__all__ = [
    "_safe_json_loads",
    "new_id",
    "now",
    "in_clause",
    "is_ban_active",
    "ban_from_row",
    "report_from_row",
    "note_from_row",
    "shift_from_row",
    "mod_log_from_row",
]
