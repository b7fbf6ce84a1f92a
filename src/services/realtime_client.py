"""
RoMod - Realtime Client Connection
==================================

Client side of the case change feed: one reconnecting websocket
session that remembers which servers it follows.

DESIGN:
    Everything lives on the connection object: the aiohttp session,
    the websocket, the subscription set, the handlers and the
    reconnect loop. After a drop it waits a fixed delay, reconnects
    and re-sends every subscription. Nothing is replayed; handlers
    re-fetch whatever they display. close() stops the loop for good.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import inspect
import json
from typing import Any, Callable, Dict, Optional, Set

import aiohttp

from src.core.config import get_config
from src.core.constants import WS_HEARTBEAT_INTERVAL
from src.core.logger import logger
from src.utils.async_utils import create_safe_task

MessageHandler = Callable[[Dict[str, Any]], Any]


class RealtimeConnection:
    """
    Reconnecting websocket session.

    Usage:
        conn = RealtimeConnection("wss://dash.example/ws", token=jwt)
        conn.add_handler(on_message)
        await conn.start()
        await conn.subscribe("123456789")
        ...
        await conn.close()
    """

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        reconnect_delay: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.url = url
        self.token = token
        self.reconnect_delay = reconnect_delay if reconnect_delay is not None else get_config().reconnect_delay

        self._session = session
        self._owns_session = session is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._subscriptions: Set[str] = set()
        self._handlers: Set[MessageHandler] = set()
        self._runner: Optional[asyncio.Task] = None
        self._connected = asyncio.Event()
        self._closed = False
        self.reconnects = 0

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    @property
    def subscriptions(self) -> Set[str]:
        return set(self._subscriptions)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Start the connect/reconnect loop in the background."""
        if self._closed:
            raise RuntimeError("Connection already closed")
        if self._runner is None or self._runner.done():
            self._runner = create_safe_task(self._run(), "Realtime Connection")

    async def wait_connected(self, timeout: Optional[float] = None) -> bool:
        try:
            await asyncio.wait_for(self._connected.wait(), timeout)
            return True
        except asyncio.TimeoutError:
            return False

    async def close(self) -> None:
        """Disconnect, stop reconnecting and drop handlers."""
        self._closed = True
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._runner is not None and not self._runner.done():
            self._runner.cancel()
            try:
                await self._runner
            except asyncio.CancelledError:
                pass
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._ws = None
        self._session = None
        self._handlers.clear()
        self._connected.clear()

    # =========================================================================
    # Handlers
    # =========================================================================

    def add_handler(self, handler: MessageHandler) -> Callable[[], None]:
        """Register a handler. Returns a callable that removes it."""
        self._handlers.add(handler)
        return lambda: self._handlers.discard(handler)

    async def _dispatch(self, data: Dict[str, Any]) -> None:
        for handler in list(self._handlers):
            try:
                result = handler(data)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning("Realtime Handler Error", [
                    ("Handler", getattr(handler, "__name__", type(handler).__name__)),
                    ("Error", str(e)[:100]),
                ])

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def subscribe(self, server_id: str) -> bool:
        """Follow a server. Remembered across reconnects."""
        server_id = str(server_id)
        self._subscriptions.add(server_id)
        return await self.send({"subscribe": server_id})

    async def unsubscribe(self, server_id: str) -> bool:
        server_id = str(server_id)
        self._subscriptions.discard(server_id)
        return await self.send({"unsubscribe": server_id})

    async def send(self, data: Dict[str, Any]) -> bool:
        """Send one JSON frame. False when not connected."""
        if not self.connected:
            logger.debug("Realtime Send Skipped", [("Reason", "Not connected")])
            return False
        try:
            await self._ws.send_str(json.dumps(data))
            return True
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
            logger.debug("Realtime Send Failed", [("Error", str(e)[:50])])
            return False

    # =========================================================================
    # Connection Loop
    # =========================================================================

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    def _connect_url(self) -> str:
        if not self.token:
            return self.url
        sep = "&" if "?" in self.url else "?"
        return f"{self.url}{sep}token={self.token}"

    async def _run(self) -> None:
        while not self._closed:
            try:
                session = await self._get_session()
                self._ws = await session.ws_connect(
                    self._connect_url(),
                    heartbeat=WS_HEARTBEAT_INTERVAL,
                )
                self._connected.set()
                logger.tree("Realtime Connected", [
                    ("URL", self.url),
                    ("Subscriptions", str(len(self._subscriptions))),
                    ("Reconnects", str(self.reconnects)),
                ], emoji="🔌")

                for server_id in sorted(self._subscriptions):
                    await self.send({"subscribe": server_id})

                await self._read_loop()
            except asyncio.CancelledError:
                raise
            except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
                logger.warning("Realtime Connection Error", [
                    ("URL", self.url),
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])
            finally:
                self._connected.clear()
                self._ws = None

            if self._closed:
                break
            logger.debug("Realtime Reconnecting", [("Delay", f"{self.reconnect_delay}s")])
            await asyncio.sleep(self.reconnect_delay)
            self.reconnects += 1

    async def _read_loop(self) -> None:
        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                try:
                    data = json.loads(msg.data)
                except json.JSONDecodeError:
                    logger.debug("Realtime Bad Frame", [("Data", str(msg.data)[:50])])
                    continue
                if isinstance(data, dict):
                    await self._dispatch(data)
            elif msg.type in (aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                break


__all__ = ["RealtimeConnection"]
