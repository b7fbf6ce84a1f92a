"""
RoMod - Players Router
======================

Cross-server player lookup: search and merged history.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.core.constants import MAX_PAGE_SIZE, SEARCH_LIMIT
from src.core.logger import logger
from src.core.scope import StaffContext
from src.api.dependencies import get_history, require_staff
from src.api.models.base import APIResponse
from src.services.aggregator import CrossServerAggregator


router = APIRouter(prefix="/players", tags=["Players"])


@router.get("/search", response_model=APIResponse[List[dict]])
async def search_players(
    q: str = Query(..., min_length=1, description="Player id or name fragment"),
    limit: int = Query(SEARCH_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    ctx: StaffContext = Depends(require_staff),
    history: CrossServerAggregator = Depends(get_history),
) -> APIResponse[List[dict]]:
    results = await history.search_players(ctx, q, limit=limit)
    return APIResponse(data=results)


@router.get("/{player_id}", response_model=APIResponse[dict])
async def player_history(
    player_id: str,
    page_size: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    ctx: StaffContext = Depends(require_staff),
    history: CrossServerAggregator = Depends(get_history),
) -> APIResponse[dict]:
    """
    Merged ban and note history for one player across the caller's servers.

    Active bans first, then history. `remaining` counts rows beyond
    the page size.
    """
    view = await history.player_history(ctx, player_id, page_size=page_size)

    logger.debug("Player History Served", [
        ("Staff", ctx.staff_id),
        ("Player", player_id),
        ("Risk", str(view.risk_score)),
    ])

    return APIResponse(data=view.to_dict())


__all__ = ["router"]
