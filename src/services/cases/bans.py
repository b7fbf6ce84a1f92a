"""
RoMod - Ban Actions Mixin
=========================

Issue, lift and expire bans.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Union

from src.core.constants import BAN_KINDS, REASON_MAX_LENGTH
from src.core.database import BanRecord
from src.core.database.base import now
from src.core.errors import InvalidStateError, ValidationError
from src.core.logger import logger
from src.core.scope import StaffContext
from src.services.cases.constants import DEACTIVATION_UNBAN
from src.services.cases.events import ChangeKind, EntityType
from src.services.relay.jobs import EnforcementAction, RelayJob
from src.services.relay.messages import ban_issued_message, ban_lifted_message
from src.utils.duration import parse_duration

if TYPE_CHECKING:
    from .service import CaseService


class BanActionsMixin:
    """Mixin for ban transitions."""

    async def issue_ban(
        self: "CaseService",
        ctx: StaffContext,
        server_id: str,
        player_id: str,
        kind: str,
        reason: str,
        duration: Union[int, str, None] = None,
        evidence: Optional[Sequence[str]] = None,
        player_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> BanRecord:
        """
        Record a new ban for a player in one server.

        Any live ban for the same player and server is superseded in the
        same transaction, so a pair never has two active bans.

        Raises:
            NotFoundError: Server outside the staff scope.
            ValidationError: Bad kind, empty reason or inconsistent duration.
        """
        ctx.require(server_id)
        self._require_choice(kind, "kind", BAN_KINDS)
        reason = self._require_text(reason, "reason", REASON_MAX_LENGTH)
        player_id = str(player_id or "").strip()
        if not player_id:
            raise ValidationError("player_id is required", {"field": "player_id"})

        seconds = None
        if kind == "temporary":
            seconds = parse_duration(duration)
            if seconds is None:
                raise ValidationError(
                    "Temporary bans need a positive duration",
                    {"field": "duration", "value": duration},
                )
        elif duration not in (None, ""):
            raise ValidationError(
                f"A {kind} ban cannot have a duration",
                {"field": "duration", "value": duration},
            )

        expires_at = now() + seconds if seconds is not None else None

        ban, superseded = await self._run(
            self.db.insert_ban,
            server_id,
            player_id,
            kind,
            reason,
            ctx.staff_id,
            expires_at,
            list(evidence or []),
            metadata,
            player_name,
        )

        logger.tree("Ban Issued", [
            ("Ban ID", ban["id"]),
            ("Server", server_id),
            ("Player", player_name or player_id),
            ("Kind", kind),
            ("By", ctx.staff_id),
        ], emoji="🔨")

        for old_id in superseded:
            self._emit(server_id, EntityType.BAN, old_id, ChangeKind.DEACTIVATED)
        self._emit(server_id, EntityType.BAN, ban["id"], ChangeKind.CREATED)

        action_kind = "warning" if kind == "warning" else "ban"
        await self._record_action(
            server_id, ctx.staff_id, action_kind, "ban", ban["id"],
            {"player_id": player_id, "kind": kind},
        )

        enforcement = None
        if kind != "warning":
            enforcement = EnforcementAction(
                player_id=player_id,
                action="ban",
                duration_seconds=seconds,
                reason=reason,
            )
        self._relay(RelayJob(
            server_id=server_id,
            ban_id=ban["id"],
            enforcement=enforcement,
            log=ban_issued_message(ban),
        ))
        return ban

    async def unban(
        self: "CaseService",
        ctx: StaffContext,
        ban_id: str,
        note: Optional[str] = None,
    ) -> BanRecord:
        """
        Lift a live ban.

        Raises:
            NotFoundError: Ban missing or outside scope.
            InvalidStateError: Ban already inactive or expired.
        """
        ban = await self._load_scoped(ctx, self.db.get_ban, ban_id, "Ban")
        note = (note or "").strip() or None

        changed = await self._run(
            self.db.deactivate_ban, ban_id, ctx.staff_id, DEACTIVATION_UNBAN, note,
        )
        if not changed:
            raise InvalidStateError(
                "Ban is not active",
                {"ban_id": ban_id, "reason": ban.get("deactivation_reason") or "expired"},
            )

        ban = await self._run(self.db.get_ban, ban_id)
        logger.tree("Ban Lifted", [
            ("Ban ID", ban_id),
            ("Server", ban["server_id"]),
            ("Player", ban["player_id"]),
            ("By", ctx.staff_id),
        ], emoji="🔓")

        self._emit(ban["server_id"], EntityType.BAN, ban_id, ChangeKind.DEACTIVATED)
        await self._record_action(
            ban["server_id"], ctx.staff_id, "unban", "ban", ban_id,
            {"player_id": ban["player_id"]},
        )
        self._relay(RelayJob(
            server_id=ban["server_id"],
            ban_id=ban_id,
            enforcement=EnforcementAction(player_id=ban["player_id"], action="unban"),
            log=ban_lifted_message(ban, ctx.staff_id, via="unban", note=note),
        ))
        return ban

    async def sweep_expired_bans(self: "CaseService", ctx: StaffContext) -> List[BanRecord]:
        """Store the inactive flag on bans past their expiry."""
        swept = await self._run(self.db.sweep_expired_bans, ctx.sorted_servers())
        for ban in swept:
            self._emit(ban["server_id"], EntityType.BAN, ban["id"], ChangeKind.DEACTIVATED)
        return swept

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_ban(self: "CaseService", ctx: StaffContext, ban_id: str) -> BanRecord:
        return await self._load_scoped(ctx, self.db.get_ban, ban_id, "Ban")

    async def list_bans(
        self: "CaseService",
        ctx: StaffContext,
        server_ids: Optional[Sequence[str]] = None,
        player_id: Optional[str] = None,
        active_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        """Bans across the requested servers, intersected with scope."""
        servers = ctx.narrow(server_ids) if server_ids else ctx.sorted_servers()
        items = await self._run(self.db.get_bans, servers, player_id, active_only, limit, offset)
        total = await self._run(self.db.count_bans, servers, player_id, active_only)
        return {"items": items, "total": total}


__all__ = ["BanActionsMixin"]
