"""
RoMod - API Services
====================

Service layer for the API.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# WebSocket
from .websocket import WebSocketManager, get_ws_manager, reset_ws_manager

# Authentication
from .auth import AuthService, get_auth_service, reset_auth_service

__all__ = [
    "WebSocketManager",
    "get_ws_manager",
    "reset_ws_manager",
    "AuthService",
    "get_auth_service",
    "reset_auth_service",
]
