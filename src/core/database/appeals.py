"""
RoMod - Database Appeal Operations Module
=========================================

Appeal storage. Review and ban deactivation commit together.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

from src.core.logger import logger
from src.core.errors import ConflictError, InvalidStateError, NotFoundError
from src.core.database.base import ban_from_row, in_clause, new_id, now
from src.core.database.models import AppealRecord, BanRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class AppealsMixin:
    """Mixin for appeal database operations."""

    def insert_appeal(
        self: "DatabaseManager",
        ban_id: str,
        submitter_id: str,
        text: str,
    ) -> AppealRecord:
        """
        Create a pending appeal against a live ban.

        Raises:
            NotFoundError: Ban does not exist.
            InvalidStateError: Ban is no longer in force.
            ConflictError: Ban already has a pending appeal.
        """
        appeal_id = new_id()
        ts = now()

        try:
            with self.transaction() as tx:
                tx.execute("SELECT * FROM bans WHERE id = ?", (ban_id,))
                row = tx.fetchone()
                if not row:
                    raise NotFoundError("Ban not found", {"ban_id": ban_id})
                ban = ban_from_row(row)
                if not ban["active"] or (ban["expires_at"] is not None and ban["expires_at"] <= ts):
                    raise InvalidStateError(
                        "Ban is not active and cannot be appealed",
                        {"ban_id": ban_id},
                    )

                tx.execute(
                    "SELECT id FROM appeals WHERE ban_id = ? AND status = 'pending'",
                    (ban_id,),
                )
                existing = tx.fetchone()
                if existing:
                    raise ConflictError(
                        "Ban already has a pending appeal",
                        {"ban_id": ban_id, "appeal_id": existing["id"]},
                    )

                tx.execute(
                    """INSERT INTO appeals (id, ban_id, server_id, submitter_id, text, status, created_at)
                       VALUES (?, ?, ?, ?, ?, 'pending', ?)""",
                    (appeal_id, ban_id, ban["server_id"], submitter_id, text, ts),
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError("Ban already has a pending appeal", {"ban_id": ban_id, "error": str(e)})

        logger.tree("Appeal Stored", [
            ("Appeal ID", appeal_id),
            ("Ban ID", ban_id),
            ("Submitter", submitter_id),
        ], emoji="📨")

        return self.get_appeal(appeal_id)

    def resolve_appeal(
        self: "DatabaseManager",
        appeal_id: str,
        decision: str,
        reviewed_by: str,
        note: Optional[str] = None,
    ) -> Tuple[AppealRecord, Optional[BanRecord]]:
        """
        Move a pending appeal to approved or denied.

        DESIGN:
            The status change is a conditional UPDATE on status = 'pending'
            so only one reviewer can win. On approval the owning ban is
            deactivated in the same transaction.

        Returns:
            (appeal, ban deactivated by this review or None)

        Raises:
            NotFoundError: Appeal does not exist.
            InvalidStateError: Appeal already reviewed.
        """
        ts = now()
        deactivated = False

        with self.transaction() as tx:
            tx.execute(
                """UPDATE appeals SET status = ?, reviewed_by = ?, review_note = ?, reviewed_at = ?
                   WHERE id = ? AND status = 'pending'""",
                (decision, reviewed_by, note, ts, appeal_id),
            )
            if tx.rowcount == 0:
                tx.execute("SELECT status FROM appeals WHERE id = ?", (appeal_id,))
                row = tx.fetchone()
                if not row:
                    raise NotFoundError("Appeal not found", {"appeal_id": appeal_id})
                raise InvalidStateError(
                    f"Appeal already {row['status']}",
                    {"appeal_id": appeal_id, "status": row["status"]},
                )

            tx.execute("SELECT ban_id FROM appeals WHERE id = ?", (appeal_id,))
            ban_id = tx.fetchone()["ban_id"]

            if decision == "approved":
                tx.execute(
                    """UPDATE bans SET active = 0, deactivated_at = ?, deactivated_by = ?,
                           deactivation_reason = 'appeal', unban_note = ?, updated_at = ?
                       WHERE id = ? AND active = 1
                         AND (expires_at IS NULL OR expires_at > ?)""",
                    (ts, reviewed_by, note, ts, ban_id, ts),
                )
                deactivated = tx.rowcount > 0

        logger.tree("Appeal Resolved", [
            ("Appeal ID", appeal_id),
            ("Decision", decision),
            ("Reviewer", reviewed_by),
            ("Ban Deactivated", "Yes" if deactivated else "No"),
        ], emoji="⚖️")

        ban = self.get_ban(ban_id) if deactivated else None
        return self.get_appeal(appeal_id), ban

    def get_appeal(self: "DatabaseManager", appeal_id: str) -> Optional[AppealRecord]:
        """Get an appeal by its ID."""
        row = self.fetchone("SELECT * FROM appeals WHERE id = ?", (appeal_id,))
        return dict(row) if row else None

    def get_ban_appeals(self: "DatabaseManager", ban_id: str) -> List[AppealRecord]:
        rows = self.fetchall(
            "SELECT * FROM appeals WHERE ban_id = ? ORDER BY created_at DESC",
            (ban_id,),
        )
        return [dict(row) for row in rows]

    def get_appeals(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[AppealRecord]:
        """List appeals across servers, pending first then newest."""
        if not server_ids:
            return []
        placeholders, params = in_clause(server_ids)
        query = f"SELECT * FROM appeals WHERE server_id IN {placeholders}"
        if status:
            query += " AND status = ?"
            params.append(status)
        query += """ ORDER BY CASE status WHEN 'pending' THEN 0 ELSE 1 END, created_at DESC
                     LIMIT ? OFFSET ?"""
        params.extend([limit, offset])
        return [dict(row) for row in self.fetchall(query, tuple(params))]


__all__ = ["AppealsMixin"]
