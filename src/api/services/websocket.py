"""
RoMod - WebSocket Manager
=========================

Real-time fan-out of case change events to dashboard sessions.

DESIGN:
    Each session carries the staff scope from its token and a set of
    subscribed server ids. A change event is sent once to every session
    subscribed to its server. Subscribing outside scope is refused.
    No persistence and no replay: a session that was offline re-fetches
    whatever it shows.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set
from dataclasses import dataclass, field

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from src.core.logger import logger
from src.core.scope import StaffContext
from src.api.config import get_api_config
from src.api.errors import ERROR_MESSAGES, ErrorCode
from src.api.models.base import WSMessage, WSEventType
from src.services.cases.events import ChangeEvent
from src.utils.async_utils import create_safe_task
from src.utils.duration import format_duration


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Connection Model
# =============================================================================

@dataclass
class WSConnection:
    """Represents an active WebSocket connection."""

    websocket: WebSocket
    ctx: StaffContext
    connected_at: datetime = field(default_factory=_utcnow)
    subscriptions: Set[str] = field(default_factory=set)

    @property
    def staff_id(self) -> str:
        return self.ctx.staff_id


# =============================================================================
# WebSocket Manager
# =============================================================================

class WebSocketManager:
    """
    Manages WebSocket sessions and fans out case change events.

    Features:
    - Sessions bound to a staff scope
    - Per-server subscriptions, refused outside scope
    - Non-blocking publish for the case service
    - Heartbeat to keep idle sessions alive
    - Failed send drops the session

    Usage:
        service = CaseService(db, publisher=get_ws_manager())
    """

    def __init__(self) -> None:
        self._connections: Dict[str, WSConnection] = {}
        self._lock = asyncio.Lock()
        self._heartbeat_task: Optional[asyncio.Task] = None
        self._config = get_api_config()

    # =========================================================================
    # Connection Management
    # =========================================================================

    async def connect(
        self,
        websocket: WebSocket,
        connection_id: str,
        ctx: StaffContext,
    ) -> bool:
        """
        Accept a new WebSocket connection.

        Returns:
            True if connection was accepted, False if limit reached
        """
        async with self._lock:
            if len(self._connections) >= self._config.ws_max_connections:
                logger.warning("WebSocket Connection Rejected", [
                    ("Reason", "Max connections reached"),
                    ("Current", str(len(self._connections))),
                    ("Max", str(self._config.ws_max_connections)),
                ])
                return False

            await websocket.accept()
            self._connections[connection_id] = WSConnection(websocket=websocket, ctx=ctx)

            logger.tree("WebSocket Connected", [
                ("Connection ID", connection_id[:8]),
                ("Staff ID", ctx.staff_id),
                ("Scope", f"{len(ctx.servers)} servers"),
                ("Total Connections", str(len(self._connections))),
            ], emoji="🔌")

            await self._send_to_connection_unlocked(connection_id, WSMessage(
                type=WSEventType.CONNECTED,
                data={
                    "connection_id": connection_id,
                    "servers": ctx.sorted_servers(),
                    "heartbeat_interval": self._config.ws_heartbeat_interval,
                },
            ))
            return True

    async def disconnect(self, connection_id: str) -> None:
        """Remove a connection."""
        async with self._lock:
            connection = self._connections.pop(connection_id, None)
            if connection is None:
                return

            logger.tree("WebSocket Disconnected", [
                ("Connection ID", connection_id[:8]),
                ("Staff ID", connection.staff_id),
                ("Duration", format_duration((_utcnow() - connection.connected_at).total_seconds())),
                ("Total Connections", str(len(self._connections))),
            ], emoji="🔌")

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def subscribe(self, connection_id: str, server_id: str) -> bool:
        """
        Subscribe a connection to one server's changes.

        Returns:
            False if the connection is gone or the server is outside scope.
        """
        server_id = str(server_id)
        async with self._lock:
            connection = self._connections.get(connection_id)
            if connection is None:
                return False
            if not connection.ctx.can_access(server_id):
                logger.warning("WebSocket Subscribe Refused", [
                    ("Connection ID", connection_id[:8]),
                    ("Staff ID", connection.staff_id),
                    ("Server", server_id),
                ])
                return False
            connection.subscriptions.add(server_id)
            return True

    async def unsubscribe(self, connection_id: str, server_id: str) -> bool:
        """Unsubscribe a connection from a server."""
        async with self._lock:
            connection = self._connections.get(connection_id)
            if connection is None:
                return False
            connection.subscriptions.discard(str(server_id))
            return True

    def subscribers(self, server_id: str) -> int:
        return sum(1 for c in self._connections.values() if str(server_id) in c.subscriptions)

    # =========================================================================
    # Client Messages
    # =========================================================================

    async def handle_message(self, connection_id: str, data: Any) -> None:
        """
        Apply one client frame.

        Frames:
            {"subscribe": serverId}
            {"unsubscribe": serverId}
            {"action": "ping"}
        """
        if not isinstance(data, dict):
            await self.send_error(connection_id, ErrorCode.WS_INVALID_MESSAGE)
            return

        if "subscribe" in data:
            server_id = str(data["subscribe"])
            if await self.subscribe(connection_id, server_id):
                await self._send_to_connection(connection_id, WSMessage(
                    type=WSEventType.SUBSCRIBED,
                    data={"serverId": server_id},
                ))
            else:
                await self.send_error(connection_id, ErrorCode.WS_SCOPE_DENIED, {"serverId": server_id})
        elif "unsubscribe" in data:
            server_id = str(data["unsubscribe"])
            await self.unsubscribe(connection_id, server_id)
            await self._send_to_connection(connection_id, WSMessage(
                type=WSEventType.UNSUBSCRIBED,
                data={"serverId": server_id},
            ))
        elif data.get("action") == "ping":
            await self._send_to_connection(connection_id, WSMessage(type=WSEventType.PONG))
        else:
            await self.send_error(connection_id, ErrorCode.WS_INVALID_MESSAGE)

    async def send_error(
        self,
        connection_id: str,
        code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
    ) -> bool:
        return await self._send_to_connection(connection_id, WSMessage(
            type=WSEventType.ERROR,
            data={
                "error_code": code.value,
                "message": ERROR_MESSAGES.get(code, "An error occurred"),
                "details": details,
            },
        ))

    # =========================================================================
    # Message Sending
    # =========================================================================

    async def _send_to_connection_unlocked(
        self,
        connection_id: str,
        message: WSMessage,
    ) -> bool:
        """Send a message to a specific connection. Caller must hold the lock."""
        connection = self._connections.get(connection_id)
        if connection is None:
            return False

        try:
            if connection.websocket.client_state == WebSocketState.CONNECTED:
                await connection.websocket.send_json(message.model_dump(mode="json"))
                return True
        except Exception as e:
            logger.debug("WebSocket Send Failed", [
                ("Connection", connection_id[:8]),
                ("Error", str(e)[:50]),
            ])
        # Schedule disconnect (outside lock to avoid deadlock)
        create_safe_task(self.disconnect(connection_id), "WS Disconnect")
        return False

    async def _send_to_connection(self, connection_id: str, message: WSMessage) -> bool:
        """Send a message to a specific connection."""
        async with self._lock:
            return await self._send_to_connection_unlocked(connection_id, message)

    async def broadcast(
        self,
        message: WSMessage,
        server_id: Optional[str] = None,
    ) -> int:
        """
        Broadcast a message.

        Args:
            message: Message to broadcast
            server_id: If provided, only send to connections subscribed to it

        Returns:
            Number of connections message was sent to
        """
        sent = 0

        async with self._lock:
            connections = list(self._connections.items())

        for conn_id, connection in connections:
            if server_id is not None and server_id not in connection.subscriptions:
                continue
            if await self._send_to_connection(conn_id, message):
                sent += 1
        return sent

    # =========================================================================
    # Change Events
    # =========================================================================

    async def broadcast_change(self, event: ChangeEvent) -> int:
        """Send one change event to every session following its server."""
        sent = await self.broadcast(WSMessage(
            type=WSEventType.CASE_CHANGED,
            data=event.to_dict(),
        ), server_id=str(event.server_id))

        logger.debug("Change Broadcast", [
            ("Server", event.server_id),
            ("Entity", f"{event.entity_type.value}/{event.entity_id}"),
            ("Change", event.change_kind.value),
            ("Sessions", str(sent)),
        ])
        return sent

    def publish(self, event: ChangeEvent) -> None:
        """Schedule a broadcast and return immediately."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No running loop: nothing can be listening
            logger.debug("Change Dropped", [("Reason", "No event loop")])
            return
        create_safe_task(self.broadcast_change(event), "Fan-Out")

    # =========================================================================
    # Heartbeat
    # =========================================================================

    async def start_heartbeat(self) -> None:
        """Start the heartbeat task."""
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = create_safe_task(self._heartbeat_loop(), "WS Heartbeat")

    async def stop_heartbeat(self) -> None:
        """Stop the heartbeat task."""
        if self._heartbeat_task and not self._heartbeat_task.done():
            self._heartbeat_task.cancel()
            try:
                await self._heartbeat_task
            except asyncio.CancelledError:
                pass

    async def _heartbeat_loop(self) -> None:
        """Send periodic heartbeats to all connections."""
        while True:
            try:
                await asyncio.sleep(self._config.ws_heartbeat_interval)
                await self.broadcast(WSMessage(
                    type=WSEventType.HEARTBEAT,
                    data={"connections": len(self._connections)},
                ))
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.debug("Heartbeat Error", [("Error", str(e)[:50])])

    # =========================================================================
    # Stats
    # =========================================================================

    @property
    def connection_count(self) -> int:
        """Get current number of connections."""
        return len(self._connections)

    def get_stats(self) -> Dict[str, Any]:
        """Get WebSocket statistics."""
        return {
            "total_connections": len(self._connections),
            "unique_staff": len({c.staff_id for c in self._connections.values()}),
            "subscriptions": sum(len(c.subscriptions) for c in self._connections.values()),
        }


# =============================================================================
# Singleton
# =============================================================================

_manager: Optional[WebSocketManager] = None


def get_ws_manager() -> WebSocketManager:
    """Get the WebSocket manager singleton."""
    global _manager
    if _manager is None:
        _manager = WebSocketManager()
    return _manager


def reset_ws_manager() -> None:
    global _manager
    _manager = None


__all__ = ["WebSocketManager", "WSConnection", "get_ws_manager", "reset_ws_manager"]
