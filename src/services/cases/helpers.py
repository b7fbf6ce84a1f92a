"""
RoMod - Case Service Helpers Mixin
==================================

Shared plumbing for the case transitions: thread offloading, input
checks, scope lookups, event publishing, relay hand-off and the
shift metric hook.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from src.core.errors import NotFoundError, ValidationError
from src.core.logger import logger
from src.core.scope import StaffContext
from src.services.cases.constants import ACTION_METRICS
from src.services.cases.events import ChangeEvent, ChangeKind, EntityType
from src.services.relay.jobs import RelayJob

if TYPE_CHECKING:
    from .service import CaseService


class HelpersMixin:
    """Mixin for case service plumbing."""

    # =========================================================================
    # Storage
    # =========================================================================

    async def _run(self: "CaseService", func: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a blocking store call off the event loop."""
        return await asyncio.to_thread(func, *args, **kwargs)

    async def _load_scoped(
        self: "CaseService",
        ctx: StaffContext,
        getter: Callable[[str], Optional[Dict[str, Any]]],
        entity_id: str,
        what: str,
    ) -> Dict[str, Any]:
        """Fetch a record, treating out-of-scope rows as missing."""
        record = await self._run(getter, entity_id)
        if record is None or not ctx.can_access(record["server_id"]):
            raise NotFoundError(f"{what} not found", {"id": entity_id})
        return record

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def _require_text(value: Optional[str], field: str, max_length: int) -> str:
        text = (value or "").strip()
        if not text:
            raise ValidationError(f"{field} is required", {"field": field})
        if len(text) > max_length:
            raise ValidationError(
                f"{field} exceeds {max_length} characters",
                {"field": field, "max_length": max_length},
            )
        return text

    @staticmethod
    def _require_choice(value: Optional[str], field: str, choices) -> str:
        if value not in choices:
            raise ValidationError(
                f"{field} must be one of: {', '.join(choices)}",
                {"field": field, "value": value},
            )
        return value

    # =========================================================================
    # Side Effects
    # =========================================================================

    def _emit(
        self: "CaseService",
        server_id: str,
        entity_type: EntityType,
        entity_id: str,
        change_kind: ChangeKind,
    ) -> None:
        """Hand a change event to fan-out. Never raises."""
        event = ChangeEvent(
            server_id=server_id,
            entity_type=entity_type,
            entity_id=entity_id,
            change_kind=change_kind,
        )
        try:
            self.publisher.publish(event)
        except Exception as e:
            logger.warning("Change Event Not Published", [
                ("Entity", f"{entity_type.value}/{entity_id}"),
                ("Change", change_kind.value),
                ("Error", str(e)[:100]),
            ])

    def _relay(self: "CaseService", job: RelayJob) -> None:
        """Hand a job to the relay gateway. Never raises."""
        if self.relay is None:
            return
        try:
            self.relay.submit(job)
        except Exception as e:
            logger.warning("Relay Job Not Submitted", [
                ("Server", job.server_id),
                ("Job", job.label),
                ("Error", str(e)[:100]),
            ])

    # =========================================================================
    # Shift Metrics
    # =========================================================================

    async def record_action(self: "CaseService", shift_id: str, kind: str) -> bool:
        """
        Increment the counters of an active shift for one action.

        DESIGN:
            Shift metrics are telemetry. Any failure is logged and
            swallowed so it never fails the action being recorded.
            Completed shifts are left untouched by the store.

        Returns:
            True if the shift was active and got incremented.
        """
        try:
            if kind not in ACTION_METRICS:
                raise ValueError(f"Unknown action kind: {kind}")
            return await self._run(self.db.increment_shift_metric, shift_id, ACTION_METRICS[kind])
        except Exception as e:
            logger.warning("Shift Metric Not Recorded", [
                ("Shift ID", shift_id),
                ("Kind", kind),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
            return False

    async def _record_action(
        self: "CaseService",
        server_id: str,
        moderator_id: str,
        kind: str,
        target_type: str,
        target_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Bump the moderator's active shift and write the audit row."""
        shift_id = None
        try:
            shift = await self._run(self.db.get_active_shift, server_id, moderator_id)
            if shift:
                shift_id = shift["id"]
                await self.record_action(shift_id, kind)
            await self._run(
                self.db.add_moderation_log,
                server_id,
                moderator_id,
                kind,
                shift_id,
                target_type,
                target_id,
                details,
            )
        except Exception as e:
            logger.warning("Action Recording Failed", [
                ("Server", server_id),
                ("Moderator", moderator_id),
                ("Kind", kind),
                ("Error", str(e)[:100]),
            ])


__all__ = ["HelpersMixin"]
