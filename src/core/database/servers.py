"""
RoMod - Database Server Settings Module
=======================================

Per-server settings, validated through ServerSettings.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Optional, TYPE_CHECKING

from src.core.logger import logger
from src.core.server_settings import ServerSettings
from src.core.database.base import now

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class ServersMixin:
    """Mixin for server settings operations."""

    def get_server_settings(self: "DatabaseManager", server_id: str) -> ServerSettings:
        """Settings for a server, defaults if it was never configured."""
        row = self.fetchone("SELECT settings FROM servers WHERE server_id = ?", (server_id,))
        if not row:
            return ServerSettings()
        return ServerSettings.from_json(row["settings"])

    def save_server_settings(
        self: "DatabaseManager",
        server_id: str,
        settings: ServerSettings,
        name: Optional[str] = None,
    ) -> None:
        self.execute(
            """INSERT INTO servers (server_id, name, settings, updated_at)
               VALUES (?, ?, ?, ?)
               ON CONFLICT(server_id) DO UPDATE SET
                   name = COALESCE(excluded.name, servers.name),
                   settings = excluded.settings,
                   updated_at = excluded.updated_at""",
            (server_id, name, settings.to_json(), now()),
        )
        logger.tree("Server Settings Saved", [
            ("Server", server_id),
            ("Roblox", "Configured" if settings.roblox.configured else "Not configured"),
            ("Mod Log", settings.logging.mod_log_channel_id or "None"),
        ], emoji="⚙️")


__all__ = ["ServersMixin"]
