"""
RoMod - Database Ban Operations Module
======================================

Ban storage with the one-active-ban-per-player rule enforced in SQL.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import json
import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from src.core.logger import logger
from src.core.errors import ConflictError
from src.core.database.base import ban_from_row, in_clause, new_id, now
from src.core.database.models import BanRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


# Active in storage and not yet past expiry
_LIVE = "active = 1 AND (expires_at IS NULL OR expires_at > ?)"


class BansMixin:
    """Mixin for ban database operations."""

    # =========================================================================
    # Writes
    # =========================================================================

    def insert_ban(
        self: "DatabaseManager",
        server_id: str,
        player_id: str,
        kind: str,
        reason: str,
        issued_by: str,
        expires_at: Optional[float] = None,
        evidence: Optional[Sequence[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        player_name: Optional[str] = None,
    ) -> Tuple[BanRecord, List[str]]:
        """
        Insert a ban, superseding any active ban for the same player.

        DESIGN:
            Runs in one BEGIN IMMEDIATE transaction so concurrent
            issuances for the same (server, player) serialize. The
            partial unique index on active rows backs this up.
            Warnings are stored inactive and never supersede.

        Returns:
            (new ban, ids of bans deactivated by this insert)
        """
        ban_id = new_id()
        ts = now()
        active = kind != "warning"
        superseded: List[str] = []

        try:
            with self.transaction() as tx:
                if active:
                    # Expired rows still flagged active are swept, not superseded
                    tx.execute(
                        """UPDATE bans SET active = 0, deactivated_at = ?,
                               deactivation_reason = 'expired', updated_at = ?
                           WHERE server_id = ? AND player_id = ? AND active = 1
                             AND expires_at IS NOT NULL AND expires_at <= ?""",
                        (ts, ts, server_id, player_id, ts),
                    )
                    tx.execute(
                        "SELECT id FROM bans WHERE server_id = ? AND player_id = ? AND active = 1",
                        (server_id, player_id),
                    )
                    superseded = [row["id"] for row in tx.fetchall()]
                    if superseded:
                        tx.execute(
                            """UPDATE bans SET active = 0, deactivated_at = ?, deactivated_by = ?,
                                   deactivation_reason = 'superseded', updated_at = ?
                               WHERE server_id = ? AND player_id = ? AND active = 1""",
                            (ts, issued_by, ts, server_id, player_id),
                        )

                tx.execute(
                    """INSERT INTO bans (
                        id, server_id, player_id, player_name, reason, kind, issued_by,
                        issued_at, expires_at, active, evidence, metadata, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        ban_id, server_id, player_id, player_name, reason, kind, issued_by,
                        ts, expires_at, 1 if active else 0,
                        json.dumps(list(evidence or [])), json.dumps(metadata or {}), ts,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError(
                "Player already has an active ban in this server",
                {"server_id": server_id, "player_id": player_id, "error": str(e)},
            )

        logger.tree("Ban Stored", [
            ("Ban ID", ban_id),
            ("Server", server_id),
            ("Player", player_id),
            ("Kind", kind),
            ("Superseded", ", ".join(superseded) if superseded else "None"),
        ], emoji="🔨")

        return self.get_ban(ban_id), superseded

    def deactivate_ban(
        self: "DatabaseManager",
        ban_id: str,
        deactivated_by: str,
        reason: str,
        note: Optional[str] = None,
    ) -> bool:
        """
        Flip a live ban to inactive.

        Returns:
            False if the ban was already inactive or expired.
        """
        ts = now()
        cursor = self.execute(
            f"""UPDATE bans SET active = 0, deactivated_at = ?, deactivated_by = ?,
                    deactivation_reason = ?, unban_note = ?, updated_at = ?
                WHERE id = ? AND {_LIVE}""",
            (ts, deactivated_by, reason, note, ts, ban_id, ts),
        )
        return cursor.rowcount > 0

    def sweep_expired_bans(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        at: Optional[float] = None,
    ) -> List[BanRecord]:
        """Store active = 0 on bans whose expiry has passed."""
        if not server_ids:
            return []
        ts = at if at is not None else now()
        placeholders, params = in_clause(server_ids)

        with self.transaction() as tx:
            tx.execute(
                f"""SELECT * FROM bans
                    WHERE active = 1 AND expires_at IS NOT NULL AND expires_at <= ?
                      AND server_id IN {placeholders}""",
                (ts, *params),
            )
            expired = [ban_from_row(row) for row in tx.fetchall()]
            for ban in expired:
                tx.execute(
                    """UPDATE bans SET active = 0, deactivated_at = ?,
                           deactivation_reason = 'expired', updated_at = ?
                       WHERE id = ? AND active = 1""",
                    (ts, ts, ban["id"]),
                )

        if expired:
            logger.tree("Expired Bans Swept", [
                ("Count", str(len(expired))),
                ("Servers", str(len(server_ids))),
            ], emoji="🧹")

        for ban in expired:
            ban["active"] = False
            ban["deactivation_reason"] = "expired"
        return expired

    def set_relay_status(
        self: "DatabaseManager",
        ban_id: str,
        status: str,
        error: Optional[str] = None,
    ) -> bool:
        """Record the enforcement relay outcome for a ban."""
        cursor = self.execute(
            "UPDATE bans SET relay_status = ?, relay_error = ?, updated_at = ? WHERE id = ?",
            (status, error, now(), ban_id),
        )
        return cursor.rowcount > 0

    # =========================================================================
    # Reads
    # =========================================================================

    def get_ban(self: "DatabaseManager", ban_id: str) -> Optional[BanRecord]:
        """Get a ban by its ID."""
        row = self.fetchone("SELECT * FROM bans WHERE id = ?", (ban_id,))
        return ban_from_row(row) if row else None

    def get_active_ban(
        self: "DatabaseManager",
        server_id: str,
        player_id: str,
    ) -> Optional[BanRecord]:
        """Get the live ban for a player in one server, if any."""
        row = self.fetchone(
            f"SELECT * FROM bans WHERE server_id = ? AND player_id = ? AND {_LIVE}",
            (server_id, player_id, now()),
        )
        return ban_from_row(row) if row else None

    def get_bans(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        player_id: Optional[str] = None,
        active_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> List[BanRecord]:
        """List bans across servers, newest first."""
        if not server_ids:
            return []
        placeholders, params = in_clause(server_ids)
        query = f"SELECT * FROM bans WHERE server_id IN {placeholders}"
        if player_id is not None:
            query += " AND player_id = ?"
            params.append(player_id)
        if active_only:
            query += f" AND {_LIVE}"
            params.append(now())
        query += " ORDER BY issued_at DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        return [ban_from_row(row) for row in self.fetchall(query, tuple(params))]

    def count_bans(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        player_id: Optional[str] = None,
        active_only: bool = False,
    ) -> int:
        if not server_ids:
            return 0
        placeholders, params = in_clause(server_ids)
        query = f"SELECT COUNT(*) AS n FROM bans WHERE server_id IN {placeholders}"
        if player_id is not None:
            query += " AND player_id = ?"
            params.append(player_id)
        if active_only:
            query += f" AND {_LIVE}"
            params.append(now())
        row = self.fetchone(query, tuple(params))
        return row["n"] if row else 0

    def get_player_bans(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        player_id: str,
    ) -> List[BanRecord]:
        """Every ban for a player within the given servers."""
        if not server_ids:
            return []
        placeholders, params = in_clause(server_ids)
        rows = self.fetchall(
            f"""SELECT * FROM bans
                WHERE player_id = ? AND server_id IN {placeholders}
                ORDER BY issued_at DESC""",
            (player_id, *params),
        )
        return [ban_from_row(row) for row in rows]

    def search_banned_players(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        query: str,
        limit: int = 20,
    ) -> List[Dict[str, Any]]:
        """
        Find players by exact id or display-name substring.

        Returns:
            Dicts with player_id, player_name, ban_count, active_bans,
            server_ids and last_issued_at.
        """
        if not server_ids or not query:
            return []
        placeholders, params = in_clause(server_ids)
        like = f"%{query.lower()}%"
        rows = self.fetchall(
            f"""SELECT player_id,
                       MAX(player_name) AS player_name,
                       COUNT(*) AS ban_count,
                       SUM(CASE WHEN {_LIVE} THEN 1 ELSE 0 END) AS active_bans,
                       GROUP_CONCAT(DISTINCT server_id) AS server_ids,
                       MAX(issued_at) AS last_issued_at
                FROM bans
                WHERE server_id IN {placeholders}
                  AND (player_id = ? OR LOWER(COALESCE(player_name, '')) LIKE ?)
                GROUP BY player_id
                ORDER BY last_issued_at DESC
                LIMIT ?""",
            (now(), *params, query, like, limit),
        )
        results = []
        for row in rows:
            item = dict(row)
            item["active_bans"] = item["active_bans"] or 0
            item["server_ids"] = sorted((item["server_ids"] or "").split(","))
            results.append(item)
        return results


__all__ = ["BansMixin"]
