"""
RoMod - Bans Router
===================

Ban issuance, lifting, expiry sweep and listing.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.core.logger import logger
from src.core.scope import StaffContext
from src.api.dependencies import get_cases, require_staff, get_pagination, PaginationParams
from src.api.models.base import APIResponse, PaginatedResponse
from src.api.models.requests import IssueBanRequest, UnbanRequest
from src.api.utils.pagination import create_paginated_response
from src.services.cases import CaseService


router = APIRouter(prefix="/bans", tags=["Bans"])


# =============================================================================
# List & Lookup
# =============================================================================

@router.get("", response_model=PaginatedResponse[dict])
async def list_bans(
    pagination: PaginationParams = Depends(get_pagination),
    server_id: Optional[List[str]] = Query(None, description="Restrict to these servers"),
    player_id: Optional[str] = Query(None, description="Filter by player"),
    active: bool = Query(False, description="Only bans in force"),
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> PaginatedResponse[dict]:
    """List bans across the caller's servers, newest first."""
    result = await cases.list_bans(
        ctx,
        server_ids=server_id,
        player_id=player_id,
        active_only=active,
        limit=pagination.per_page,
        offset=pagination.offset,
    )

    logger.debug("Bans Listed", [
        ("Staff", ctx.staff_id),
        ("Page", str(pagination.page)),
        ("Results", str(len(result["items"]))),
        ("Total", str(result["total"])),
    ])

    return create_paginated_response(result["items"], result["total"], pagination)


@router.get("/{ban_id}", response_model=APIResponse[dict])
async def get_ban(
    ban_id: str,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    ban = await cases.get_ban(ctx, ban_id)
    appeals = await cases.list_ban_appeals(ctx, ban_id)
    return APIResponse(data={**ban, "appeals": appeals})


# =============================================================================
# Actions
# =============================================================================

@router.post("", response_model=APIResponse[dict], status_code=201)
async def issue_ban(
    body: IssueBanRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    """Issue a permanent or temporary ban, or a warning."""
    ban = await cases.issue_ban(
        ctx,
        server_id=body.server_id,
        player_id=body.player_id,
        kind=body.kind,
        reason=body.reason,
        duration=body.duration,
        evidence=body.evidence,
        player_name=body.player_name,
        metadata=body.metadata,
    )
    return APIResponse(message="Ban issued", data=ban)


@router.post("/{ban_id}/unban", response_model=APIResponse[dict])
async def unban(
    ban_id: str,
    body: Optional[UnbanRequest] = None,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    ban = await cases.unban(ctx, ban_id, note=body.note if body else None)
    return APIResponse(message="Ban lifted", data=ban)


@router.post("/sweep", response_model=APIResponse[dict])
async def sweep_expired(
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    """Store the inactive flag on every expired ban in scope."""
    swept = await cases.sweep_expired_bans(ctx)
    return APIResponse(data={"swept": len(swept), "ban_ids": [b["id"] for b in swept]})


__all__ = ["router"]
