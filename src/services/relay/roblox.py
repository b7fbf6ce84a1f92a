"""
RoMod - Roblox Open Cloud Client
================================

Applies and lifts game-join restrictions through the Open Cloud
user-restrictions API.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import Any, Dict, Optional

import aiohttp

from src.core.constants import API_TIMEOUT, ROBLOX_API_BASE
from src.core.errors import RelayFailure, RelayRejected
from src.core.logger import logger
from src.core.server_settings import RobloxSettings
from src.services.relay.jobs import EnforcementAction


class RobloxCloudClient:
    """
    Game-platform enforcer backed by Roblox Open Cloud.

    DESIGN:
        One persistent aiohttp session per process. 429 and 5xx answers
        become RelayFailure and are retried by the gateway. Other 4xx
        answers become RelayRejected and fail the job at once.
    """

    def __init__(self, base_url: str = ROBLOX_API_BASE) -> None:
        self.base_url = base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create persistent HTTP session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=10,
                limit_per_host=5,
                ttl_dns_cache=300,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=API_TIMEOUT),
            )
        return self._session

    async def close(self) -> None:
        """Close HTTP session on shutdown."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    @staticmethod
    def build_payload(settings: RobloxSettings, action: EnforcementAction) -> Dict[str, Any]:
        """Request body for a restriction change."""
        restriction: Dict[str, Any] = {"active": action.action == "ban"}
        if action.action == "ban":
            reason = action.reason or "Banned by moderation team"
            restriction["privateReason"] = reason
            restriction["displayReason"] = reason
            restriction["excludeAltAccounts"] = settings.exclude_alt_accounts
            if action.duration_seconds:
                restriction["duration"] = f"{int(action.duration_seconds)}s"
        return {"gameJoinRestriction": restriction}

    async def apply(self, settings: RobloxSettings, action: EnforcementAction) -> None:
        """
        Apply one restriction change.

        Raises:
            RelayRejected: Credentials missing, or a 4xx other than 429.
            RelayFailure: Any other non-2xx response.
        """
        if not settings.configured:
            raise RelayRejected("Roblox credentials not configured")

        url = (
            f"{self.base_url}/universes/{settings.universe_id}"
            f"/user-restrictions/{action.player_id}"
        )
        start = time.monotonic()
        session = await self._get_session()
        async with session.patch(
            url,
            json=self.build_payload(settings, action),
            headers={"x-api-key": settings.api_key, "Content-Type": "application/json"},
        ) as response:
            if response.status >= 300:
                body = await response.text()
                raise RelayFailure.for_status(
                    f"Roblox API returned {response.status}",
                    response.status,
                    details={"body": body[:200]},
                )

        logger.tree("Roblox Restriction Updated", [
            ("Player", action.player_id),
            ("Action", action.action),
            ("Universe", settings.universe_id),
            ("Duration", f"{int((time.monotonic() - start) * 1000)}ms"),
        ], emoji="🎮")


__all__ = ["RobloxCloudClient"]
