"""
RoMod - Case Service
====================

The case state machine: every legal transition of bans, appeals,
tickets, shifts, reports and notes.

Structure:
    - helpers.py: Thread offloading, scope lookups, events, relay, metrics
    - bans.py: Issue, unban, expiry sweep
    - appeals.py: Submit and review
    - tickets.py: Create, claim, priority, close, reopen
    - shifts.py: Start, end, shift and audit reads
    - reports.py: Reports and moderator notes

DESIGN:
    Each operation commits one consistent store transaction or raises
    without partial effects. Event publishing, shift metrics and relay
    run after the commit and can never fail or undo it.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING, Optional

from src.core.database import DatabaseManager, get_db
from src.core.logger import logger
from src.services.cases.appeals import AppealActionsMixin
from src.services.cases.bans import BanActionsMixin
from src.services.cases.events import ChangePublisher
from src.services.cases.helpers import HelpersMixin
from src.services.cases.reports import ReportActionsMixin
from src.services.cases.shifts import ShiftActionsMixin
from src.services.cases.tickets import TicketActionsMixin

if TYPE_CHECKING:
    from src.services.relay.gateway import EnforcementRelayGateway


class _NullPublisher:
    """Publisher used until a realtime transport is attached."""

    def publish(self, event) -> None:
        logger.debug("Change Event (No Subscribers)", [
            ("Server", event.server_id),
            ("Entity", f"{event.entity_type.value}/{event.entity_id}"),
            ("Change", event.change_kind.value),
        ])


class CaseService(
    HelpersMixin,
    BanActionsMixin,
    AppealActionsMixin,
    TicketActionsMixin,
    ShiftActionsMixin,
    ReportActionsMixin,
):
    """
    Moderation case lifecycle.

    Attributes:
        db: Case store.
        publisher: Receives a ChangeEvent after every committed change.
        relay: Background gateway to Roblox and Discord, or None.
    """

    def __init__(
        self,
        db: DatabaseManager,
        publisher: Optional[ChangePublisher] = None,
        relay: Optional["EnforcementRelayGateway"] = None,
    ) -> None:
        self.db = db
        self.publisher = publisher or _NullPublisher()
        self.relay = relay

        logger.tree("Case Service Initialized", [
            ("Publisher", type(self.publisher).__name__),
            ("Relay", "Enabled" if relay else "Disabled"),
        ], emoji="📂")


# =============================================================================
# Singleton
# =============================================================================

_service: Optional[CaseService] = None


def get_case_service() -> CaseService:
    """Get the shared case service, creating a relay-less one if unset."""
    global _service
    if _service is None:
        _service = CaseService(get_db())
    return _service


def set_case_service(service: Optional[CaseService]) -> None:
    """Install (or clear) the shared case service."""
    global _service
    _service = service


__all__ = [
    "CaseService",
    "get_case_service",
    "set_case_service",
]
