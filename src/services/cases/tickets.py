"""
RoMod - Ticket Actions Mixin
============================

Support tickets: creation, claiming, priority, close and reopen.

DESIGN:
    Close and reopen are always legal and idempotent. Events and
    shift metrics only fire when the stored status actually changes.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING, List, Optional, Sequence

from src.core.constants import (
    DEFAULT_TICKET_CATEGORY,
    DEFAULT_TICKET_PRIORITY,
    TICKET_PRIORITIES,
    TICKET_TITLE_MAX_LENGTH,
)
from src.core.database import TicketRecord
from src.core.errors import ConflictError, InvalidStateError, ValidationError
from src.core.logger import logger
from src.core.scope import StaffContext
from src.services.cases.events import ChangeKind, EntityType

if TYPE_CHECKING:
    from .service import CaseService

DESCRIPTION_MAX_LENGTH = 4000


class TicketActionsMixin:
    """Mixin for ticket transitions."""

    async def create_ticket(
        self: "CaseService",
        ctx: StaffContext,
        server_id: str,
        submitter_id: str,
        title: str,
        description: str,
        category: str = DEFAULT_TICKET_CATEGORY,
        priority: str = DEFAULT_TICKET_PRIORITY,
        submitter_name: Optional[str] = None,
    ) -> TicketRecord:
        ctx.require(server_id)
        title = self._require_text(title, "title", TICKET_TITLE_MAX_LENGTH)
        description = self._require_text(description, "description", DESCRIPTION_MAX_LENGTH)
        self._require_choice(priority, "priority", TICKET_PRIORITIES)

        settings = await self._run(self.db.get_server_settings, server_id)
        if not settings.tickets.enabled:
            raise InvalidStateError("Tickets are disabled for this server", {"server_id": server_id})
        category = (category or DEFAULT_TICKET_CATEGORY).strip().lower()
        if category not in settings.tickets.categories:
            raise ValidationError(
                f"Unknown ticket category: {category}",
                {"field": "category", "allowed": list(settings.tickets.categories)},
            )

        ticket = await self._run(
            self.db.insert_ticket,
            server_id,
            str(submitter_id),
            title,
            description,
            category,
            priority,
            submitter_name,
        )

        logger.tree("Ticket Created", [
            ("Ticket ID", ticket["id"]),
            ("Server", server_id),
            ("Category", category),
            ("Priority", priority),
        ], emoji="🎫")

        self._emit(server_id, EntityType.TICKET, ticket["id"], ChangeKind.CREATED)
        return ticket

    async def claim_ticket(self: "CaseService", ctx: StaffContext, ticket_id: str) -> TicketRecord:
        """
        Assign an unclaimed ticket to the caller.

        Raises:
            ConflictError: Someone already holds the ticket.
        """
        await self._load_scoped(ctx, self.db.get_ticket, ticket_id, "Ticket")

        if not await self._run(self.db.claim_ticket, ticket_id, ctx.staff_id):
            current = await self._run(self.db.get_ticket, ticket_id)
            raise ConflictError(
                "Ticket already claimed",
                {"ticket_id": ticket_id, "assigned_to": current["assigned_to"] if current else None},
            )

        ticket = await self._run(self.db.get_ticket, ticket_id)
        self._emit(ticket["server_id"], EntityType.TICKET, ticket_id, ChangeKind.CLAIMED)
        return ticket

    async def set_priority(
        self: "CaseService",
        ctx: StaffContext,
        ticket_id: str,
        priority: str,
    ) -> TicketRecord:
        self._require_choice(priority, "priority", TICKET_PRIORITIES)
        ticket = await self._load_scoped(ctx, self.db.get_ticket, ticket_id, "Ticket")

        if await self._run(self.db.set_ticket_priority, ticket_id, priority):
            ticket = await self._run(self.db.get_ticket, ticket_id)
            self._emit(ticket["server_id"], EntityType.TICKET, ticket_id, ChangeKind.UPDATED)
        return ticket

    async def close_ticket(self: "CaseService", ctx: StaffContext, ticket_id: str) -> TicketRecord:
        ticket = await self._load_scoped(ctx, self.db.get_ticket, ticket_id, "Ticket")

        if not await self._run(self.db.close_ticket, ticket_id, ctx.staff_id):
            return ticket

        ticket = await self._run(self.db.get_ticket, ticket_id)
        self._emit(ticket["server_id"], EntityType.TICKET, ticket_id, ChangeKind.CLOSED)
        await self._record_action(
            ticket["server_id"], ctx.staff_id, "ticket_close", "ticket", ticket_id,
        )
        return ticket

    async def reopen_ticket(self: "CaseService", ctx: StaffContext, ticket_id: str) -> TicketRecord:
        ticket = await self._load_scoped(ctx, self.db.get_ticket, ticket_id, "Ticket")

        if not await self._run(self.db.reopen_ticket, ticket_id):
            return ticket

        ticket = await self._run(self.db.get_ticket, ticket_id)
        self._emit(ticket["server_id"], EntityType.TICKET, ticket_id, ChangeKind.REOPENED)
        return ticket

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_ticket(self: "CaseService", ctx: StaffContext, ticket_id: str) -> TicketRecord:
        return await self._load_scoped(ctx, self.db.get_ticket, ticket_id, "Ticket")

    async def list_tickets(
        self: "CaseService",
        ctx: StaffContext,
        server_ids: Optional[Sequence[str]] = None,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[TicketRecord]:
        servers = ctx.narrow(server_ids) if server_ids else ctx.sorted_servers()
        return await self._run(self.db.get_tickets, servers, status, assigned_to, limit, offset)


__all__ = ["TicketActionsMixin"]
