"""
RoMod - Report & Note Actions Mixin
===================================

Player reports from the community and private moderator notes.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING, List, Optional, Sequence

from src.core.constants import NOTE_MAX_LENGTH, REASON_MAX_LENGTH, REPORT_DECISIONS
from src.core.database import NoteRecord, ReportRecord
from src.core.errors import ValidationError
from src.core.scope import StaffContext
from src.services.cases.events import ChangeKind, EntityType
from src.services.relay.jobs import RelayJob
from src.services.relay.messages import report_filed_message

if TYPE_CHECKING:
    from .service import CaseService


def _player_id(value) -> str:
    player_id = str(value or "").strip()
    if not player_id:
        raise ValidationError("player_id is required", {"field": "player_id"})
    return player_id


class ReportActionsMixin:
    """Mixin for report and note transitions."""

    # =========================================================================
    # Reports
    # =========================================================================

    async def create_report(
        self: "CaseService",
        ctx: StaffContext,
        server_id: str,
        player_id: str,
        reason: str,
        reported_by: Optional[str] = None,
        evidence: Optional[Sequence[str]] = None,
        player_name: Optional[str] = None,
    ) -> ReportRecord:
        ctx.require(server_id)
        player_id = _player_id(player_id)
        reason = self._require_text(reason, "reason", REASON_MAX_LENGTH)

        report = await self._run(
            self.db.insert_report,
            server_id,
            player_id,
            reason,
            str(reported_by) if reported_by else ctx.staff_id,
            list(evidence or []),
            player_name,
        )

        self._emit(server_id, EntityType.REPORT, report["id"], ChangeKind.CREATED)
        self._relay(RelayJob(
            server_id=server_id,
            log=report_filed_message(report),
            log_channel="reports",
        ))
        return report

    async def review_report(
        self: "CaseService",
        ctx: StaffContext,
        report_id: str,
        decision: str,
        note: Optional[str] = None,
    ) -> ReportRecord:
        """
        Mark a pending report reviewed or dismissed.

        Raises:
            ValidationError: Unknown decision.
            NotFoundError: Report missing or outside scope.
            InvalidStateError: Report already handled.
        """
        self._require_choice(decision, "decision", REPORT_DECISIONS)
        await self._load_scoped(ctx, self.db.get_report, report_id, "Report")

        report = await self._run(
            self.db.resolve_report, report_id, decision, ctx.staff_id, (note or "").strip() or None,
        )

        self._emit(report["server_id"], EntityType.REPORT, report_id, ChangeKind.REVIEWED)
        await self._record_action(
            report["server_id"], ctx.staff_id, "report_process", "report", report_id,
            {"decision": decision},
        )
        return report

    async def list_reports(
        self: "CaseService",
        ctx: StaffContext,
        server_ids: Optional[Sequence[str]] = None,
        status: Optional[str] = None,
        player_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ReportRecord]:
        servers = ctx.narrow(server_ids) if server_ids else ctx.sorted_servers()
        return await self._run(self.db.get_reports, servers, status, player_id, limit, offset)

    # =========================================================================
    # Notes
    # =========================================================================

    async def add_note(
        self: "CaseService",
        ctx: StaffContext,
        server_id: str,
        player_id: str,
        note: str,
        important: bool = False,
    ) -> NoteRecord:
        ctx.require(server_id)
        player_id = _player_id(player_id)
        note = self._require_text(note, "note", NOTE_MAX_LENGTH)

        record = await self._run(
            self.db.insert_note, server_id, player_id, ctx.staff_id, note, bool(important),
        )
        self._emit(server_id, EntityType.NOTE, record["id"], ChangeKind.CREATED)
        return record


__all__ = ["ReportActionsMixin"]
