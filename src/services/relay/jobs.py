"""
RoMod - Relay Jobs
==================

What the case service hands to the relay gateway after a commit.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class EnforcementAction:
    """In-game restriction change for one player."""

    player_id: str
    action: str                      # "ban" or "unban"
    duration_seconds: Optional[int] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class LogMessage:
    """Content of the chat log embed."""

    title: str
    color: int
    fields: List[Tuple[str, str]] = field(default_factory=list)
    description: Optional[str] = None


@dataclass(frozen=True)
class RelayJob:
    """
    One committed change to forward.

    Attributes:
        server_id: Server whose settings pick the credentials and channel.
        ban_id: Ban whose relay_status records the enforcement outcome.
        enforcement: In-game action, None for log-only jobs.
        log: Chat log content, None to skip logging.
        log_channel: Which configured channel the log goes to. Falls back
            to the mod-log channel when that section has none.
    """

    server_id: str
    ban_id: Optional[str] = None
    enforcement: Optional[EnforcementAction] = None
    log: Optional[LogMessage] = None
    log_channel: str = "mod"         # "mod", "appeals" or "reports"

    @property
    def label(self) -> str:
        if self.enforcement:
            return f"{self.enforcement.action} {self.enforcement.player_id}"
        return self.log.title if self.log else "relay"


__all__ = [
    "EnforcementAction",
    "LogMessage",
    "RelayJob",
]
