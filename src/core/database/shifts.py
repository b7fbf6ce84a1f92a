"""
RoMod - Database Shift Operations Module
========================================

Moderator shifts and their action counters.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3
from typing import List, Optional, Sequence, TYPE_CHECKING

from src.core.logger import logger
from src.core.errors import ConflictError
from src.core.database.base import in_clause, new_id, now, shift_from_row
from src.core.database.models import ShiftRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


METRIC_COLUMNS = (
    "bans_issued",
    "appeals_reviewed",
    "tickets_handled",
    "reports_processed",
)
"""Counters that can be bumped alongside actions_count."""


class ShiftsMixin:
    """Mixin for shift database operations."""

    def start_shift(
        self: "DatabaseManager",
        server_id: str,
        moderator_id: str,
    ) -> ShiftRecord:
        """
        Open a shift for a moderator in a server.

        Raises:
            ConflictError: The moderator already has an active shift there.
        """
        shift_id = new_id()
        ts = now()

        try:
            with self.transaction() as tx:
                tx.execute(
                    """SELECT id FROM shifts
                       WHERE server_id = ? AND moderator_id = ? AND status = 'active'""",
                    (server_id, moderator_id),
                )
                existing = tx.fetchone()
                if existing:
                    raise ConflictError(
                        "Moderator already has an active shift in this server",
                        {"shift_id": existing["id"], "server_id": server_id},
                    )
                tx.execute(
                    """INSERT INTO shifts (id, server_id, moderator_id, start_time, status)
                       VALUES (?, ?, ?, ?, 'active')""",
                    (shift_id, server_id, moderator_id, ts),
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError(
                "Moderator already has an active shift in this server",
                {"server_id": server_id, "error": str(e)},
            )

        logger.tree("Shift Started", [
            ("Shift ID", shift_id),
            ("Server", server_id),
            ("Moderator", moderator_id),
        ], emoji="🟢")
        return self.get_shift(shift_id)

    def end_shift(
        self: "DatabaseManager",
        server_id: str,
        moderator_id: str,
    ) -> Optional[ShiftRecord]:
        """
        Complete the active shift. End time never precedes start time.

        Returns:
            The completed shift, or None if none was active.
        """
        ts = now()
        with self.transaction() as tx:
            tx.execute(
                """SELECT id FROM shifts
                   WHERE server_id = ? AND moderator_id = ? AND status = 'active'""",
                (server_id, moderator_id),
            )
            row = tx.fetchone()
            if not row:
                return None
            shift_id = row["id"]
            tx.execute(
                """UPDATE shifts SET status = 'completed', end_time = MAX(?, start_time)
                   WHERE id = ? AND status = 'active'""",
                (ts, shift_id),
            )

        shift = self.get_shift(shift_id)
        logger.tree("Shift Ended", [
            ("Shift ID", shift_id),
            ("Moderator", moderator_id),
            ("Actions", str(shift["metrics"]["actions_count"])),
        ], emoji="🔴")
        return shift

    def increment_shift_metric(
        self: "DatabaseManager",
        shift_id: str,
        metric: Optional[str] = None,
    ) -> bool:
        """
        Bump actions_count (and one named counter) on an active shift.

        Returns:
            False if the shift is completed or missing.
        """
        if metric is not None and metric not in METRIC_COLUMNS:
            raise ValueError(f"Unknown shift metric: {metric}")
        extra = f", {metric} = {metric} + 1" if metric else ""
        cursor = self.execute(
            f"""UPDATE shifts SET actions_count = actions_count + 1{extra}
                WHERE id = ? AND status = 'active'""",
            (shift_id,),
        )
        return cursor.rowcount > 0

    def get_shift(self: "DatabaseManager", shift_id: str) -> Optional[ShiftRecord]:
        row = self.fetchone("SELECT * FROM shifts WHERE id = ?", (shift_id,))
        return shift_from_row(row) if row else None

    def get_active_shift(
        self: "DatabaseManager",
        server_id: str,
        moderator_id: str,
    ) -> Optional[ShiftRecord]:
        row = self.fetchone(
            """SELECT * FROM shifts
               WHERE server_id = ? AND moderator_id = ? AND status = 'active'""",
            (server_id, moderator_id),
        )
        return shift_from_row(row) if row else None

    def get_shifts(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        moderator_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ShiftRecord]:
        """List shifts, most recent first."""
        if not server_ids:
            return []
        placeholders, params = in_clause(server_ids)
        query = f"SELECT * FROM shifts WHERE server_id IN {placeholders}"
        if moderator_id:
            query += " AND moderator_id = ?"
            params.append(moderator_id)
        if status:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY start_time DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        return [shift_from_row(row) for row in self.fetchall(query, tuple(params))]


__all__ = ["ShiftsMixin", "METRIC_COLUMNS"]
