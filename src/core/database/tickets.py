"""
RoMod - Database Ticket Operations Module
=========================================

Support ticket storage.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import List, Optional, Sequence, TYPE_CHECKING

from src.core.logger import logger
from src.core.database.base import in_clause, new_id, now
from src.core.database.models import TicketRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class TicketsMixin:
    """Mixin for ticket database operations."""

    def insert_ticket(
        self: "DatabaseManager",
        server_id: str,
        submitter_id: str,
        title: str,
        description: str,
        category: str,
        priority: str,
        submitter_name: Optional[str] = None,
    ) -> TicketRecord:
        """Create a new open, unassigned ticket."""
        ticket_id = new_id()
        ts = now()
        self.execute(
            """INSERT INTO tickets (
                id, server_id, submitter_id, submitter_name, title, description,
                category, status, priority, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, 'open', ?, ?, ?)""",
            (ticket_id, server_id, submitter_id, submitter_name, title, description,
             category, priority, ts, ts),
        )
        logger.tree("Ticket Created", [
            ("Ticket ID", ticket_id),
            ("Server", server_id),
            ("Category", category),
            ("Priority", priority),
        ], emoji="🎫")
        return self.get_ticket(ticket_id)

    def get_ticket(self: "DatabaseManager", ticket_id: str) -> Optional[TicketRecord]:
        """Get a ticket by its ID."""
        row = self.fetchone("SELECT * FROM tickets WHERE id = ?", (ticket_id,))
        return dict(row) if row else None

    def claim_ticket(self: "DatabaseManager", ticket_id: str, staff_id: str) -> bool:
        """Assign a ticket only if nobody holds it yet."""
        cursor = self.execute(
            """UPDATE tickets SET assigned_to = ?, updated_at = ?
               WHERE id = ? AND assigned_to IS NULL""",
            (staff_id, now(), ticket_id),
        )
        if cursor.rowcount > 0:
            logger.tree("Ticket Claimed", [
                ("Ticket ID", ticket_id),
                ("Staff ID", staff_id),
            ], emoji="✋")
            return True
        return False

    def set_ticket_priority(self: "DatabaseManager", ticket_id: str, priority: str) -> bool:
        """Set ticket priority. Returns False when unchanged."""
        cursor = self.execute(
            "UPDATE tickets SET priority = ?, updated_at = ? WHERE id = ? AND priority != ?",
            (priority, now(), ticket_id, priority),
        )
        if cursor.rowcount > 0:
            logger.tree("Ticket Priority Set", [
                ("Ticket ID", ticket_id),
                ("Priority", priority),
            ], emoji="🔔")
            return True
        return False

    def close_ticket(self: "DatabaseManager", ticket_id: str, closed_by: str) -> bool:
        """Close an open ticket. Returns False if it was already closed."""
        ts = now()
        cursor = self.execute(
            """UPDATE tickets SET status = 'closed', closed_at = ?, closed_by = ?, updated_at = ?
               WHERE id = ? AND status = 'open'""",
            (ts, closed_by, ts, ticket_id),
        )
        if cursor.rowcount > 0:
            logger.tree("Ticket Closed", [
                ("Ticket ID", ticket_id),
                ("Closed By", closed_by),
            ], emoji="🔒")
            return True
        return False

    def reopen_ticket(self: "DatabaseManager", ticket_id: str) -> bool:
        """Reopen a closed ticket. Returns False if it was already open."""
        cursor = self.execute(
            """UPDATE tickets SET status = 'open', closed_at = NULL, closed_by = NULL, updated_at = ?
               WHERE id = ? AND status = 'closed'""",
            (now(), ticket_id),
        )
        if cursor.rowcount > 0:
            logger.tree("Ticket Reopened", [("Ticket ID", ticket_id)], emoji="🔓")
            return True
        return False

    def get_tickets(
        self: "DatabaseManager",
        server_ids: Sequence[str],
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[TicketRecord]:
        """List tickets, highest priority and oldest first."""
        if not server_ids:
            return []
        placeholders, params = in_clause(server_ids)
        query = f"SELECT * FROM tickets WHERE server_id IN {placeholders}"
        if status:
            query += " AND status = ?"
            params.append(status)
        if assigned_to:
            query += " AND assigned_to = ?"
            params.append(assigned_to)
        query += """ ORDER BY
                       CASE priority WHEN 'high' THEN 1 WHEN 'medium' THEN 2 WHEN 'low' THEN 3 END,
                       created_at ASC
                     LIMIT ? OFFSET ?"""
        params.extend([limit, offset])
        return [dict(row) for row in self.fetchall(query, tuple(params))]


__all__ = ["TicketsMixin"]
