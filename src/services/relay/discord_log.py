"""
RoMod - Discord Log Client
==========================

Posts case log embeds to a server's mod-log channel through the
Discord REST API.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime
from typing import Optional

import aiohttp
import discord

from src.core.constants import API_TIMEOUT, DISCORD_API_BASE, EMBED_FIELD_MAX_LENGTH
from src.core.errors import RelayFailure
from src.core.logger import NY_TZ
from src.services.relay.jobs import LogMessage


FOOTER_TEXT = "RoMod Moderation"


def build_embed(message: LogMessage) -> discord.Embed:
    """Render a LogMessage as a Discord embed."""
    embed = discord.Embed(
        title=message.title,
        description=message.description,
        color=message.color,
        timestamp=datetime.now(NY_TZ),
    )
    for name, value in message.fields:
        text = str(value) if value else "None"
        if len(text) > EMBED_FIELD_MAX_LENGTH:
            text = text[:EMBED_FIELD_MAX_LENGTH - 3] + "..."
        embed.add_field(name=name, value=text, inline=len(text) < 40)
    embed.set_footer(text=FOOTER_TEXT)
    return embed


class DiscordLogClient:
    """Chat-platform logger using a bot token."""

    def __init__(self, token: str, base_url: str = DISCORD_API_BASE) -> None:
        self.token = token
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

    async def post(self, channel_id: str, message: LogMessage) -> None:
        """
        Send one embed to a channel.

        Raises:
            RelayFailure: Discord rejected the message (RelayRejected for
                permanent 4xx errors).
        """
        session = await self._get_session()
        async with session.post(
            f"{self.base_url}/channels/{channel_id}/messages",
            json={"embeds": [build_embed(message).to_dict()]},
            headers={"Authorization": f"Bot {self.token}"},
        ) as response:
            if response.status >= 300:
                body = await response.text()
                raise RelayFailure.for_status(
                    f"Discord API returned {response.status}",
                    response.status,
                    details={"channel_id": channel_id, "body": body[:200]},
                )


__all__ = ["DiscordLogClient", "build_embed"]
