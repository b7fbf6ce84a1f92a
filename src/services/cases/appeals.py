"""
RoMod - Appeal Actions Mixin
============================

Submission and review of ban appeals.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING, List, Optional, Sequence

from src.core.constants import APPEAL_DECISIONS, APPEAL_TEXT_MAX_LENGTH
from src.core.database import AppealRecord
from src.core.errors import InvalidStateError
from src.core.logger import logger
from src.core.scope import StaffContext
from src.services.cases.events import ChangeKind, EntityType
from src.services.relay.jobs import EnforcementAction, RelayJob
from src.services.relay.messages import (
    appeal_denied_message,
    appeal_submitted_message,
    ban_lifted_message,
)

if TYPE_CHECKING:
    from .service import CaseService


class AppealActionsMixin:
    """Mixin for appeal transitions."""

    async def submit_appeal(
        self: "CaseService",
        ctx: StaffContext,
        ban_id: str,
        submitter_id: str,
        text: str,
    ) -> AppealRecord:
        """
        Open a pending appeal against a live ban.

        Raises:
            ValidationError: Empty text.
            NotFoundError: Ban missing or outside scope.
            InvalidStateError: Ban not active, or appeals disabled.
            ConflictError: Ban already has a pending appeal.
        """
        text = self._require_text(text, "text", APPEAL_TEXT_MAX_LENGTH)
        ban = await self._load_scoped(ctx, self.db.get_ban, ban_id, "Ban")

        settings = await self._run(self.db.get_server_settings, ban["server_id"])
        if not settings.appeals.enabled:
            raise InvalidStateError(
                "Appeals are disabled for this server",
                {"server_id": ban["server_id"]},
            )

        appeal = await self._run(self.db.insert_appeal, ban_id, str(submitter_id), text)

        self._emit(ban["server_id"], EntityType.APPEAL, appeal["id"], ChangeKind.CREATED)
        self._relay(RelayJob(
            server_id=ban["server_id"],
            log=appeal_submitted_message(appeal, ban),
            log_channel="appeals",
        ))
        return appeal

    async def review_appeal(
        self: "CaseService",
        ctx: StaffContext,
        appeal_id: str,
        decision: str,
        note: Optional[str] = None,
    ) -> AppealRecord:
        """
        Approve or deny a pending appeal.

        Approval lifts the ban in the same transaction. If the ban had
        already lapsed the appeal is still approved, with nothing to lift.

        Raises:
            ValidationError: Decision not approved/denied.
            NotFoundError: Appeal missing or outside scope.
            InvalidStateError: Appeal already reviewed.
        """
        self._require_choice(decision, "decision", APPEAL_DECISIONS)
        appeal = await self._load_scoped(ctx, self.db.get_appeal, appeal_id, "Appeal")
        note = (note or "").strip() or None
        server_id = appeal["server_id"]

        appeal, lifted = await self._run(
            self.db.resolve_appeal, appeal_id, decision, ctx.staff_id, note,
        )

        logger.tree("Appeal Reviewed", [
            ("Appeal ID", appeal_id),
            ("Decision", decision),
            ("Reviewer", ctx.staff_id),
            ("Ban Lifted", "Yes" if lifted else "No"),
        ], emoji="⚖️")

        kind = ChangeKind.APPROVED if decision == "approved" else ChangeKind.DENIED
        self._emit(server_id, EntityType.APPEAL, appeal_id, kind)
        if lifted:
            self._emit(server_id, EntityType.BAN, lifted["id"], ChangeKind.DEACTIVATED)

        await self._record_action(
            server_id, ctx.staff_id, "appeal_review", "appeal", appeal_id,
            {"decision": decision, "ban_id": appeal["ban_id"]},
        )

        if lifted:
            self._relay(RelayJob(
                server_id=server_id,
                ban_id=lifted["id"],
                enforcement=EnforcementAction(player_id=lifted["player_id"], action="unban"),
                log=ban_lifted_message(lifted, ctx.staff_id, via="appeal", note=note),
                log_channel="appeals",
            ))
        elif decision == "denied":
            self._relay(RelayJob(
                server_id=server_id,
                log=appeal_denied_message(appeal),
                log_channel="appeals",
            ))
        return appeal

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_appeal(self: "CaseService", ctx: StaffContext, appeal_id: str) -> AppealRecord:
        return await self._load_scoped(ctx, self.db.get_appeal, appeal_id, "Appeal")

    async def list_ban_appeals(
        self: "CaseService",
        ctx: StaffContext,
        ban_id: str,
    ) -> List[AppealRecord]:
        await self._load_scoped(ctx, self.db.get_ban, ban_id, "Ban")
        return await self._run(self.db.get_ban_appeals, ban_id)

    async def list_appeals(
        self: "CaseService",
        ctx: StaffContext,
        server_ids: Optional[Sequence[str]] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[AppealRecord]:
        servers = ctx.narrow(server_ids) if server_ids else ctx.sorted_servers()
        return await self._run(self.db.get_appeals, servers, status, limit, offset)


__all__ = ["AppealActionsMixin"]
