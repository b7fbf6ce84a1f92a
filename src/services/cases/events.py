"""
RoMod - Case Change Events
==========================

The minimal change notification pushed to dashboard sessions.

DESIGN:
    Events carry ids only. Clients re-fetch the entity they care
    about, so there is nothing to replay after a reconnect.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Protocol


class EntityType(str, Enum):
    BAN = "ban"
    APPEAL = "appeal"
    TICKET = "ticket"
    SHIFT = "shift"
    REPORT = "report"
    NOTE = "note"


class ChangeKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DEACTIVATED = "deactivated"
    APPROVED = "approved"
    DENIED = "denied"
    CLAIMED = "claimed"
    CLOSED = "closed"
    REOPENED = "reopened"
    STARTED = "started"
    ENDED = "ended"
    REVIEWED = "reviewed"
    RELAY_FAILED = "relay_failed"


@dataclass(frozen=True)
class ChangeEvent:
    """One committed change to one entity."""

    server_id: str
    entity_type: EntityType
    entity_id: str
    change_kind: ChangeKind

    def to_dict(self) -> Dict[str, str]:
        """Wire format sent to realtime clients."""
        return {
            "serverId": self.server_id,
            "entityType": self.entity_type.value,
            "entityId": self.entity_id,
            "changeKind": self.change_kind.value,
        }


class ChangePublisher(Protocol):
    """Anything that can take a change event without blocking."""

    def publish(self, event: ChangeEvent) -> None:
        ...


__all__ = [
    "EntityType",
    "ChangeKind",
    "ChangeEvent",
    "ChangePublisher",
]
