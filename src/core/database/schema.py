"""
RoMod - Database Schema Module
==============================

Table definitions and indexes.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """
        Initialize all database tables.

        DESIGN: Tables are created if not exist, allowing safe restarts.
        Uniqueness rules (one active ban per player, one active shift per
        moderator, one pending appeal per ban) are partial unique indexes
        so a racing writer fails at the storage layer.
        """
        conn = self._ensure_connection()
        cursor = conn.cursor()

        # -----------------------------------------------------------------
        # Servers Table
        # DESIGN: One row per Discord server, settings stored as JSON
        # validated by ServerSettings on the way in and out
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS servers (
                server_id TEXT PRIMARY KEY,
                name TEXT,
                settings TEXT NOT NULL DEFAULT '{}',
                updated_at REAL NOT NULL
            )
        """)

        # -----------------------------------------------------------------
        # Bans Table
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS bans (
                id TEXT PRIMARY KEY,
                server_id TEXT NOT NULL,
                player_id TEXT NOT NULL,
                player_name TEXT,
                reason TEXT NOT NULL,
                kind TEXT NOT NULL CHECK (kind IN ('permanent', 'temporary', 'warning')),
                issued_by TEXT NOT NULL,
                issued_at REAL NOT NULL,
                expires_at REAL,
                active INTEGER NOT NULL DEFAULT 1,
                evidence TEXT NOT NULL DEFAULT '[]',
                metadata TEXT NOT NULL DEFAULT '{}',
                deactivated_at REAL,
                deactivated_by TEXT,
                deactivation_reason TEXT,
                unban_note TEXT,
                relay_status TEXT NOT NULL DEFAULT 'pending',
                relay_error TEXT,
                updated_at REAL NOT NULL
            )
        """)
        cursor.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_bans_one_active
            ON bans(server_id, player_id) WHERE active = 1
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_bans_player ON bans(player_id, issued_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_bans_server ON bans(server_id, issued_at)"
        )

        # -----------------------------------------------------------------
        # Appeals Table
        # DESIGN: Owned by its ban, removed with it
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS appeals (
                id TEXT PRIMARY KEY,
                ban_id TEXT NOT NULL REFERENCES bans(id) ON DELETE CASCADE,
                server_id TEXT NOT NULL,
                submitter_id TEXT NOT NULL,
                text TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'pending'
                    CHECK (status IN ('pending', 'approved', 'denied')),
                reviewed_by TEXT,
                review_note TEXT,
                reviewed_at REAL,
                created_at REAL NOT NULL
            )
        """)
        cursor.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_appeals_one_pending
            ON appeals(ban_id) WHERE status = 'pending'
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_appeals_server ON appeals(server_id, status)"
        )

        # -----------------------------------------------------------------
        # Tickets Table
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS tickets (
                id TEXT PRIMARY KEY,
                server_id TEXT NOT NULL,
                submitter_id TEXT NOT NULL,
                submitter_name TEXT,
                title TEXT NOT NULL,
                description TEXT NOT NULL,
                category TEXT NOT NULL DEFAULT 'general',
                status TEXT NOT NULL DEFAULT 'open' CHECK (status IN ('open', 'closed')),
                priority TEXT NOT NULL DEFAULT 'medium'
                    CHECK (priority IN ('low', 'medium', 'high')),
                assigned_to TEXT,
                closed_by TEXT,
                closed_at REAL,
                created_at REAL NOT NULL,
                updated_at REAL NOT NULL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_tickets_server ON tickets(server_id, status)"
        )

        # -----------------------------------------------------------------
        # Shifts Table
        # DESIGN: Metrics are columns so increments are a single UPDATE
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS shifts (
                id TEXT PRIMARY KEY,
                server_id TEXT NOT NULL,
                moderator_id TEXT NOT NULL,
                start_time REAL NOT NULL,
                end_time REAL,
                status TEXT NOT NULL DEFAULT 'active'
                    CHECK (status IN ('active', 'completed')),
                actions_count INTEGER NOT NULL DEFAULT 0,
                bans_issued INTEGER NOT NULL DEFAULT 0,
                appeals_reviewed INTEGER NOT NULL DEFAULT 0,
                tickets_handled INTEGER NOT NULL DEFAULT 0,
                reports_processed INTEGER NOT NULL DEFAULT 0
            )
        """)
        cursor.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_shifts_one_active
            ON shifts(server_id, moderator_id) WHERE status = 'active'
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_shifts_moderator ON shifts(moderator_id, start_time)"
        )

        # -----------------------------------------------------------------
        # Reports Table
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS reports (
                id TEXT PRIMARY KEY,
                server_id TEXT NOT NULL,
                player_id TEXT NOT NULL,
                player_name TEXT,
                reason TEXT NOT NULL,
                reported_by TEXT NOT NULL,
                evidence TEXT NOT NULL DEFAULT '[]',
                status TEXT NOT NULL DEFAULT 'pending'
                    CHECK (status IN ('pending', 'reviewed', 'dismissed')),
                reviewed_by TEXT,
                review_note TEXT,
                reviewed_at REAL,
                created_at REAL NOT NULL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_reports_player ON reports(player_id, server_id)"
        )

        # -----------------------------------------------------------------
        # Moderator Notes Table
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS moderator_notes (
                id TEXT PRIMARY KEY,
                server_id TEXT NOT NULL,
                player_id TEXT NOT NULL,
                author_id TEXT NOT NULL,
                note TEXT NOT NULL,
                is_important INTEGER NOT NULL DEFAULT 0,
                created_at REAL NOT NULL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_notes_player ON moderator_notes(player_id, server_id)"
        )

        # -----------------------------------------------------------------
        # Moderation Logs Table
        # DESIGN: Append-only audit trail written alongside shift metrics
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS moderation_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                server_id TEXT NOT NULL,
                moderator_id TEXT NOT NULL,
                shift_id TEXT,
                action TEXT NOT NULL,
                target_type TEXT,
                target_id TEXT,
                details TEXT NOT NULL DEFAULT '{}',
                created_at REAL NOT NULL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_mod_logs_server ON moderation_logs(server_id, created_at)"
        )

        conn.commit()


__all__ = ["SchemaMixin"]
