"""
RoMod - Database Report Operations Module
=========================================

Player reports submitted by staff or the companion bot.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import json
from typing import List, Optional, Sequence, TYPE_CHECKING

from src.core.logger import logger
from src.core.errors import InvalidStateError, NotFoundError
from src.core.database.base import in_clause, new_id, now, report_from_row
from src.core.database.models import ReportRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class ReportsMixin:
    """Mixin for player report database operations."""

    def insert_report(
        self: "DatabaseManager",
        server_id: str,
        player_id: str,
        reason: str,
        reported_by: str,
        evidence: Optional[Sequence[str]] = None,
        player_name: Optional[str] = None,
    ) -> ReportRecord:
        report_id = new_id()
        self.execute(
            """INSERT INTO reports (
                id, server_id, player_id, player_name, reason, reported_by, evidence, status, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, 'pending', ?)""",
            (report_id, server_id, player_id, player_name, reason, reported_by,
             json.dumps(list(evidence or [])), now()),
        )
        logger.tree("Report Filed", [
            ("Report ID", report_id),
            ("Server", server_id),
            ("Player", player_id),
        ], emoji="🚩")
        return self.get_report(report_id)

    def resolve_report(
        self: "DatabaseManager",
        report_id: str,
        decision: str,
        reviewed_by: str,
        note: Optional[str] = None,
    ) -> ReportRecord:
        """
        Move a pending report to reviewed or dismissed.

        Raises:
            NotFoundError: Report does not exist.
            InvalidStateError: Report already handled.
        """
        cursor = self.execute(
            """UPDATE reports SET status = ?, reviewed_by = ?, review_note = ?, reviewed_at = ?
               WHERE id = ? AND status = 'pending'""",
            (decision, reviewed_by, note, now(), report_id),
        )
        if cursor.rowcount == 0:
            report = self.get_report(report_id)
            if not report:
                raise NotFoundError("Report not found", {"report_id": report_id})
            raise InvalidStateError(
                f"Report already {report['status']}",
                {"report_id": report_id, "status": report["status"]},
            )
        return self.get_report(report_id)

    def get_report(self: "DatabaseManager", report_id: str) -> Optional[ReportRecord]:
        row = self.fetchone("SELECT * FROM reports WHERE id = ?", (report_id,))
        return report_from_row(row) if row else None

    def get_reports(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        status: Optional[str] = None,
        player_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ReportRecord]:
        if not server_ids:
            return []
        placeholders, params = in_clause(server_ids)
        query = f"SELECT * FROM reports WHERE server_id IN {placeholders}"
        if status:
            query += " AND status = ?"
            params.append(status)
        if player_id:
            query += " AND player_id = ?"
            params.append(player_id)
        query += " ORDER BY created_at DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        return [report_from_row(row) for row in self.fetchall(query, tuple(params))]

    def count_player_reports(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        player_id: str,
    ) -> int:
        """Reports against a player within the given servers, any status."""
        if not server_ids:
            return 0
        placeholders, params = in_clause(server_ids)
        row = self.fetchone(
            f"SELECT COUNT(*) AS n FROM reports WHERE player_id = ? AND server_id IN {placeholders}",
            (player_id, *params),
        )
        return row["n"] if row else 0


__all__ = ["ReportsMixin"]
