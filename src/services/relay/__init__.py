"""
RoMod - Relay Package
=====================

Forwarding of committed case changes to Roblox and Discord.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .jobs import EnforcementAction, LogMessage, RelayJob
from .gateway import EnforcementRelayGateway, Enforcer, ChatLogger
from .roblox import RobloxCloudClient
from .discord_log import DiscordLogClient, build_embed

__all__ = [
    "EnforcementAction",
    "LogMessage",
    "RelayJob",
    "EnforcementRelayGateway",
    "Enforcer",
    "ChatLogger",
    "RobloxCloudClient",
    "DiscordLogClient",
    "build_embed",
]
