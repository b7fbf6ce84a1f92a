"""
RoMod - Staff Scope
===================

The authenticated staff member and the set of servers they may act on.

DESIGN:
    Supplied by the auth layer for every request and trusted as-is.
    Anything outside the scope is treated exactly like a missing
    record so callers can't discover other servers' cases.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List

from src.core.errors import NotFoundError


@dataclass(frozen=True)
class StaffContext:
    """Staff id plus authorized server ids."""

    staff_id: str
    servers: FrozenSet[str]

    @classmethod
    def create(cls, staff_id: str, servers: Iterable[str]) -> "StaffContext":
        return cls(staff_id=str(staff_id), servers=frozenset(str(s) for s in servers))

    def can_access(self, server_id: str) -> bool:
        return str(server_id) in self.servers

    def require(self, server_id: str, what: str = "Server") -> None:
        """Raise NotFoundError if server_id is outside scope."""
        if not self.can_access(server_id):
            raise NotFoundError(f"{what} not found", {"server_id": str(server_id)})

    def narrow(self, server_ids: Iterable[str]) -> List[str]:
        """Intersect requested servers with scope, preserving request order."""
        seen = []
        for sid in server_ids:
            sid = str(sid)
            if sid in self.servers and sid not in seen:
                seen.append(sid)
        return seen

    def sorted_servers(self) -> List[str]:
        return sorted(self.servers)


__all__ = ["StaffContext"]
