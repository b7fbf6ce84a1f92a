"""
RoMod - Cross-Server Aggregator
===============================

Read-only merged view of one player's standing across every server
the requesting staff member can see.

DESIGN:
    Storage is always queried with the staff scope as the server
    filter, so rows from servers outside scope are never loaded, let
    alone returned. Nothing here writes. Expired bans are shown as
    history even when their stored flag has not been swept yet.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from src.core.config import get_config
from src.core.constants import (
    MAX_PAGE_SIZE,
    RISK_ACTIVE_BAN,
    RISK_PER_BAN,
    RISK_PER_IMPORTANT_NOTE,
    RISK_PER_REPORT,
    RISK_SCORE_MAX,
    SEARCH_LIMIT,
)
from src.core.database import BanRecord, DatabaseManager, NoteRecord, get_db, is_ban_active
from src.core.database.base import now
from src.core.logger import logger
from src.core.scope import StaffContext


# =============================================================================
# Result Type
# =============================================================================

@dataclass
class PlayerHistory:
    """
    One player's merged case view.

    Attributes:
        active: Bans in force, newest first.
        history: Lifted, superseded, expired bans and warnings, newest first.
        remaining: Ban rows cut by the page size.
        notes: Moderator notes, newest first.
        notes_remaining: Notes cut by the page size.
        servers: In-scope servers holding any record for the player.
    """

    player_id: str
    player_name: Optional[str] = None
    active: List[BanRecord] = field(default_factory=list)
    history: List[BanRecord] = field(default_factory=list)
    remaining: int = 0
    notes: List[NoteRecord] = field(default_factory=list)
    notes_remaining: int = 0
    servers: List[str] = field(default_factory=list)
    ban_count: int = 0
    report_count: int = 0
    risk_score: int = 0
    flags: List[str] = field(default_factory=list)

    @property
    def is_banned(self) -> bool:
        return bool(self.active)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "is_banned": self.is_banned,
            "active": self.active,
            "history": self.history,
            "remaining": self.remaining,
            "notes": self.notes,
            "notes_remaining": self.notes_remaining,
            "servers": self.servers,
            "ban_count": self.ban_count,
            "report_count": self.report_count,
            "risk_score": self.risk_score,
            "flags": self.flags,
        }


# =============================================================================
# Risk
# =============================================================================

def calculate_risk_score(
    ban_count: int,
    has_active_ban: bool,
    report_count: int,
    important_notes: int,
) -> Tuple[int, List[str]]:
    """
    Calculate risk score (0-100) and flags for a player.

    Risk factors:
    - Each ban or warning on record: +20
    - Currently banned anywhere in scope: +30
    - Each report: +5
    - Each note marked important: +10
    """
    score = 0
    flags = []

    if ban_count:
        score += ban_count * RISK_PER_BAN
        if ban_count >= 3:
            flags.append("repeat_offender")
        elif ban_count >= 2:
            flags.append("previous_bans")

    if has_active_ban:
        score += RISK_ACTIVE_BAN
        flags.append("currently_banned")

    if report_count:
        score += report_count * RISK_PER_REPORT
        flags.append("reported")

    if important_notes:
        score += important_notes * RISK_PER_IMPORTANT_NOTE
        flags.append("flagged_by_staff")

    return min(score, RISK_SCORE_MAX), flags


# =============================================================================
# Aggregator
# =============================================================================

class CrossServerAggregator:
    """Merges per-server case rows into one scoped player view."""

    def __init__(self, db: DatabaseManager, page_size: Optional[int] = None) -> None:
        self.db = db
        self.page_size = page_size or get_config().page_size

    def _clamp(self, page_size: Optional[int]) -> int:
        size = page_size if page_size is not None else self.page_size
        return max(1, min(int(size), MAX_PAGE_SIZE))

    async def player_history(
        self,
        ctx: StaffContext,
        player_id: str,
        page_size: Optional[int] = None,
    ) -> PlayerHistory:
        """
        Build the merged view for one player.

        Active bans come first (newest issuedAt first), then inactive
        ones by issuedAt descending. The combined list is cut to the
        page size and the number of cut rows is reported, not hidden.
        """
        player_id = str(player_id)
        view = PlayerHistory(player_id=player_id)
        servers = ctx.sorted_servers()
        if not servers:
            return view

        limit = self._clamp(page_size)
        bans, notes, report_count = await asyncio.gather(
            asyncio.to_thread(self.db.get_player_bans, servers, player_id),
            asyncio.to_thread(self.db.get_player_notes, servers, player_id),
            asyncio.to_thread(self.db.count_player_reports, servers, player_id),
        )

        at = now()
        active = [b for b in bans if is_ban_active(b, at)]
        inactive = [b for b in bans if not is_ban_active(b, at)]
        for ban in inactive:
            ban["active"] = False
        active.sort(key=lambda b: b["issued_at"], reverse=True)
        inactive.sort(key=lambda b: b["issued_at"], reverse=True)

        ordered = active + inactive
        kept = ordered[:limit]
        view.active = kept[:len(active)]
        view.history = kept[len(active):]
        view.remaining = len(ordered) - len(kept)

        notes.sort(key=lambda n: n["created_at"], reverse=True)
        view.notes = notes[:limit]
        view.notes_remaining = len(notes) - len(view.notes)

        view.player_name = next((b["player_name"] for b in bans if b.get("player_name")), None)
        view.servers = sorted({b["server_id"] for b in bans} | {n["server_id"] for n in notes})
        view.ban_count = len(bans)
        view.report_count = report_count
        view.risk_score, view.flags = calculate_risk_score(
            ban_count=len(bans),
            has_active_ban=bool(active),
            report_count=report_count,
            important_notes=sum(1 for n in notes if n["is_important"]),
        )

        logger.debug("Player History Built", [
            ("Player", player_id),
            ("Servers", str(len(view.servers))),
            ("Active", str(len(active))),
            ("Remaining", str(view.remaining)),
        ])
        return view

    async def search_players(
        self,
        ctx: StaffContext,
        query: str,
        limit: int = SEARCH_LIMIT,
    ) -> List[Dict[str, Any]]:
        """Players matching an id or display-name substring, within scope."""
        query = (query or "").strip()
        servers = ctx.sorted_servers()
        if not query or not servers:
            return []
        limit = max(1, min(int(limit), MAX_PAGE_SIZE))
        return await asyncio.to_thread(self.db.search_banned_players, servers, query, limit)


# =============================================================================
# Singleton
# =============================================================================

_aggregator: Optional[CrossServerAggregator] = None


def get_aggregator() -> CrossServerAggregator:
    """Get the shared aggregator."""
    global _aggregator
    if _aggregator is None:
        _aggregator = CrossServerAggregator(get_db())
    return _aggregator


__all__ = [
    "PlayerHistory",
    "calculate_risk_score",
    "CrossServerAggregator",
    "get_aggregator",
]
