"""
RoMod - Servers Router
======================

Per-server settings: channels, appeals, tickets and Roblox credentials.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends

from src.core.database import DatabaseManager
from src.core.scope import StaffContext
from src.core.server_settings import ServerSettings
from src.api.dependencies import get_store, require_staff
from src.api.models.base import APIResponse


router = APIRouter(prefix="/servers", tags=["Servers"])


@router.get("", response_model=APIResponse[List[str]])
async def list_servers(ctx: StaffContext = Depends(require_staff)) -> APIResponse[List[str]]:
    """Servers in the caller's scope."""
    return APIResponse(data=ctx.sorted_servers())


@router.get("/{server_id}/settings", response_model=APIResponse[dict])
async def get_settings(
    server_id: str,
    ctx: StaffContext = Depends(require_staff),
    db: DatabaseManager = Depends(get_store),
) -> APIResponse[dict]:
    """Settings with secrets masked."""
    ctx.require(server_id)
    settings = await asyncio.to_thread(db.get_server_settings, server_id)
    return APIResponse(data=settings.redacted())


@router.put("/{server_id}/settings", response_model=APIResponse[dict])
async def put_settings(
    server_id: str,
    body: Dict[str, Any] = Body(...),
    name: Optional[str] = None,
    ctx: StaffContext = Depends(require_staff),
    db: DatabaseManager = Depends(get_store),
) -> APIResponse[dict]:
    """Replace a server's settings. Unknown keys are rejected."""
    ctx.require(server_id)
    settings = ServerSettings.parse(body)
    await asyncio.to_thread(db.save_server_settings, server_id, settings, name)

    return APIResponse(message="Settings saved", data=settings.redacted())


__all__ = ["router"]
