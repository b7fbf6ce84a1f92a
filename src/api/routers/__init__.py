"""
RoMod - API Routers
===================

Route handlers for the API.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .health import router as health_router
from .bans import router as bans_router
from .appeals import router as appeals_router
from .tickets import router as tickets_router
from .shifts import router as shifts_router
from .reports import router as reports_router
from .players import router as players_router
from .servers import router as servers_router
from .websocket import router as websocket_router

__all__ = [
    "health_router",
    "bans_router",
    "appeals_router",
    "tickets_router",
    "shifts_router",
    "reports_router",
    "players_router",
    "servers_router",
    "websocket_router",
]
