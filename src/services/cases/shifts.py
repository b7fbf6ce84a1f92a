"""
RoMod - Shift Actions Mixin
===========================

Moderator on-duty shifts.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING, List, Optional, Sequence

from src.core.database import ModLogRecord, ShiftRecord
from src.core.errors import NotFoundError
from src.core.scope import StaffContext
from src.services.cases.events import ChangeKind, EntityType

if TYPE_CHECKING:
    from .service import CaseService


class ShiftActionsMixin:
    """Mixin for shift transitions."""

    async def start_shift(self: "CaseService", ctx: StaffContext, server_id: str) -> ShiftRecord:
        """
        Put the caller on duty in a server.

        Raises:
            ConflictError: The caller already has an active shift there.
        """
        ctx.require(server_id)
        shift = await self._run(self.db.start_shift, server_id, ctx.staff_id)
        self._emit(server_id, EntityType.SHIFT, shift["id"], ChangeKind.STARTED)
        return shift

    async def end_shift(
        self: "CaseService",
        ctx: StaffContext,
        server_id: str,
        moderator_id: Optional[str] = None,
    ) -> ShiftRecord:
        """
        Complete the active shift of a moderator (the caller by default).

        Raises:
            NotFoundError: No active shift.
        """
        ctx.require(server_id)
        moderator_id = str(moderator_id) if moderator_id else ctx.staff_id

        shift = await self._run(self.db.end_shift, server_id, moderator_id)
        if shift is None:
            raise NotFoundError(
                "No active shift",
                {"server_id": server_id, "moderator_id": moderator_id},
            )
        self._emit(server_id, EntityType.SHIFT, shift["id"], ChangeKind.ENDED)
        return shift

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_active_shift(
        self: "CaseService",
        ctx: StaffContext,
        server_id: str,
        moderator_id: Optional[str] = None,
    ) -> Optional[ShiftRecord]:
        ctx.require(server_id)
        return await self._run(
            self.db.get_active_shift, server_id, str(moderator_id) if moderator_id else ctx.staff_id,
        )

    async def list_shifts(
        self: "CaseService",
        ctx: StaffContext,
        server_ids: Optional[Sequence[str]] = None,
        moderator_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ShiftRecord]:
        servers = ctx.narrow(server_ids) if server_ids else ctx.sorted_servers()
        return await self._run(self.db.get_shifts, servers, moderator_id, status, limit, offset)

    async def list_moderation_logs(
        self: "CaseService",
        ctx: StaffContext,
        server_ids: Optional[Sequence[str]] = None,
        moderator_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ModLogRecord]:
        servers = ctx.narrow(server_ids) if server_ids else ctx.sorted_servers()
        return await self._run(self.db.get_moderation_logs, servers, moderator_id, limit, offset)


__all__ = ["ShiftActionsMixin"]
