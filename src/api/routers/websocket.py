"""
RoMod - WebSocket Router
========================

WebSocket endpoint for real-time case change events.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import json
import uuid
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query
from starlette.websockets import WebSocketState

from src.core.logger import logger
from src.api.errors import ERROR_MESSAGES, ErrorCode
from src.api.services.websocket import get_ws_manager
from src.api.services.auth import get_auth_service
from src.api.models.base import WSMessage, WSEventType

# Timeout for receiving messages (seconds)
# Short timeout to detect dead connections quickly
RECEIVE_TIMEOUT = 15


router = APIRouter(tags=["WebSocket"])


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: Optional[str] = Query(None, description="JWT auth token"),
):
    """
    WebSocket endpoint for real-time dashboard updates.

    Connect with a staff token:
        ws://host/ws?token=<jwt_token>

    Client frames:
    - {"subscribe": "<serverId>"}: follow one server (must be in scope)
    - {"unsubscribe": "<serverId>"}
    - {"action": "ping"}

    Server frames:
    - connected, subscribed, unsubscribed, pong, heartbeat, error
    - case.changed: {serverId, entityType, entityId, changeKind}
    """
    ws_manager = get_ws_manager()
    connection_id = str(uuid.uuid4())

    ctx = get_auth_service().get_staff_context(token) if token else None
    if ctx is None:
        logger.warning("WebSocket Auth Failed", [
            ("Connection ID", connection_id[:8]),
            ("Token", "Present" if token else "Missing"),
        ])
        await websocket.close(code=1008, reason=ERROR_MESSAGES[ErrorCode.WS_AUTH_REQUIRED])
        return

    accepted = await ws_manager.connect(websocket, connection_id, ctx)
    if not accepted:
        await websocket.close(code=1008, reason="Connection limit reached")
        return

    try:
        while True:
            if websocket.client_state != WebSocketState.CONNECTED:
                break

            try:
                raw = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=RECEIVE_TIMEOUT,
                )
            except asyncio.TimeoutError:
                # Check the connection; a failed send drops it
                if not await ws_manager._send_to_connection(connection_id, WSMessage(
                    type=WSEventType.HEARTBEAT,
                    data={},
                )):
                    break
                continue

            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                await ws_manager.send_error(connection_id, ErrorCode.WS_INVALID_MESSAGE)
                continue

            await ws_manager.handle_message(connection_id, data)

    except WebSocketDisconnect:
        pass  # Normal disconnect, handled in finally
    except Exception as e:
        logger.warning("WebSocket Error", [
            ("Connection ID", connection_id[:8]),
            ("Error", f"{type(e).__name__}: {str(e)[:100]}"),
        ])
    finally:
        await ws_manager.disconnect(connection_id)


__all__ = ["router"]
