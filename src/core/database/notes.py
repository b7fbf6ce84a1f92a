"""
RoMod - Database Moderator Notes Module
=======================================

Append-only staff notes attached to a player.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import List, Sequence, TYPE_CHECKING

from src.core.logger import logger
from src.core.database.base import in_clause, new_id, note_from_row, now
from src.core.database.models import NoteRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class NotesMixin:
    """Mixin for moderator note operations."""

    def insert_note(
        self: "DatabaseManager",
        server_id: str,
        player_id: str,
        author_id: str,
        note: str,
        is_important: bool = False,
    ) -> NoteRecord:
        note_id = new_id()
        self.execute(
            """INSERT INTO moderator_notes (id, server_id, player_id, author_id, note, is_important, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (note_id, server_id, player_id, author_id, note, 1 if is_important else 0, now()),
        )
        logger.tree("Note Added", [
            ("Player", player_id),
            ("Server", server_id),
            ("Important", "Yes" if is_important else "No"),
        ], emoji="📝")
        row = self.fetchone("SELECT * FROM moderator_notes WHERE id = ?", (note_id,))
        return note_from_row(row)

    def get_player_notes(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        player_id: str,
    ) -> List[NoteRecord]:
        """Notes for a player within the given servers, newest first."""
        if not server_ids:
            return []
        placeholders, params = in_clause(server_ids)
        rows = self.fetchall(
            f"""SELECT * FROM moderator_notes
                WHERE player_id = ? AND server_id IN {placeholders}
                ORDER BY created_at DESC""",
            (player_id, *params),
        )
        return [note_from_row(row) for row in rows]


__all__ = ["NotesMixin"]
