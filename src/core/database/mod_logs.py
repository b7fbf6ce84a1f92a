"""
RoMod - Database Moderation Log Module
======================================

Audit trail of recorded moderator actions.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import json
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

from src.core.database.base import in_clause, mod_log_from_row, now
from src.core.database.models import ModLogRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class ModLogsMixin:
    """Mixin for moderation log operations."""

    def add_moderation_log(
        self: "DatabaseManager",
        server_id: str,
        moderator_id: str,
        action: str,
        shift_id: Optional[str] = None,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.execute(
            """INSERT INTO moderation_logs
               (server_id, moderator_id, shift_id, action, target_type, target_id, details, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (server_id, moderator_id, shift_id, action, target_type, target_id,
             json.dumps(details or {}), now()),
        )

    def get_moderation_logs(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        moderator_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ModLogRecord]:
        if not server_ids:
            return []
        placeholders, params = in_clause(server_ids)
        query = f"SELECT * FROM moderation_logs WHERE server_id IN {placeholders}"
        if moderator_id:
            query += " AND moderator_id = ?"
            params.append(moderator_id)
        query += " ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        return [mod_log_from_row(row) for row in self.fetchall(query, tuple(params))]


__all__ = ["ModLogsMixin"]
