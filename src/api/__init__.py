"""
RoMod - API Package
===================

FastAPI-based REST and WebSocket API for the moderation dashboard.

Author: حَـــــنَّـــــا
Server: discord.gg/syria

Features:
- JWT-based staff authentication with per-server scope
- Ban, appeal, ticket, shift, report and note endpoints
- Cross-server player history
- Real-time change notifications over WebSocket

Usage:
    from src.api import APIService

    api_service = APIService()
    await api_service.start()
    ...
    await api_service.stop()

Standalone (for development):
    uvicorn src.api.app:create_app --factory --reload
"""

import asyncio
from typing import Optional

import uvicorn

from src.core.logger import logger
from src.utils.async_utils import create_safe_task
from src.api.config import get_api_config, APIConfig
from src.api.app import create_app
from src.api.services.websocket import get_ws_manager, WebSocketManager


# =============================================================================
# API Service
# =============================================================================

class APIService:
    """
    Manages the FastAPI server lifecycle.

    Runs uvicorn in a background task so the caller keeps its own loop.
    """

    def __init__(self) -> None:
        self._config = get_api_config()
        self._app = create_app()
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def ws_manager(self) -> WebSocketManager:
        return get_ws_manager()

    async def start(self) -> None:
        """Start the API server in a background task."""
        if self.is_running:
            logger.warning("API Already Running", [])
            return

        config = uvicorn.Config(
            app=self._app,
            host=self._config.host,
            port=self._config.port,
            log_level="warning",
            access_log=False,
        )

        self._server = uvicorn.Server(config)
        self._task = create_safe_task(self._run_server(), "API Server")

        logger.tree("API Service Started", [
            ("Host", self._config.host),
            ("Port", str(self._config.port)),
            ("Debug", str(self._config.debug)),
        ], emoji="🌐")

    async def _run_server(self) -> None:
        try:
            await self._server.serve()
        except asyncio.CancelledError:
            logger.debug("API Server Cancelled", [])
        except Exception as e:
            logger.error("API Server Error", [
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])

    async def wait(self) -> None:
        """Block until the server task finishes."""
        if self._task:
            await asyncio.gather(self._task, return_exceptions=True)

    async def stop(self) -> None:
        """Stop the API server gracefully."""
        if not self.is_running:
            return

        logger.tree("API Service Stopping", [], emoji="🛑")

        if self._server:
            self._server.should_exit = True

        if self._task:
            try:
                await asyncio.wait_for(self._task, timeout=5.0)
            except asyncio.TimeoutError:
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass

        self._server = None
        self._task = None

        logger.tree("API Service Stopped", [], emoji="✅")


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "APIService",
    "get_api_config",
    "APIConfig",
    "create_app",
]
