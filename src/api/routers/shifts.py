"""
RoMod - Shifts Router
=====================

Moderator shift endpoints and the moderation audit log.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.core.scope import StaffContext
from src.api.dependencies import get_cases, require_staff, get_pagination, PaginationParams
from src.api.models.base import APIResponse, PaginatedResponse
from src.api.models.requests import ShiftRequest
from src.api.utils.pagination import create_paginated_response
from src.services.cases import CaseService


router = APIRouter(prefix="/shifts", tags=["Shifts"])


@router.get("", response_model=PaginatedResponse[dict])
async def list_shifts(
    pagination: PaginationParams = Depends(get_pagination),
    server_id: Optional[List[str]] = Query(None, description="Restrict to these servers"),
    moderator_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="active or completed"),
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> PaginatedResponse[dict]:
    shifts = await cases.list_shifts(
        ctx,
        server_ids=server_id,
        moderator_id=moderator_id,
        status=status,
        limit=pagination.per_page,
        offset=pagination.offset,
    )
    return create_paginated_response(shifts, None, pagination)


@router.get("/active", response_model=APIResponse[Optional[dict]])
async def get_active_shift(
    server_id: str = Query(...),
    moderator_id: Optional[str] = Query(None, description="Defaults to the caller"),
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[Optional[dict]]:
    return APIResponse(data=await cases.get_active_shift(ctx, server_id, moderator_id))


@router.get("/logs", response_model=PaginatedResponse[dict])
async def list_moderation_logs(
    pagination: PaginationParams = Depends(get_pagination),
    server_id: Optional[List[str]] = Query(None),
    moderator_id: Optional[str] = Query(None),
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> PaginatedResponse[dict]:
    """Recorded moderation actions, newest first."""
    logs = await cases.list_moderation_logs(
        ctx,
        server_ids=server_id,
        moderator_id=moderator_id,
        limit=pagination.per_page,
        offset=pagination.offset,
    )
    return create_paginated_response(logs, None, pagination)


@router.post("/start", response_model=APIResponse[dict], status_code=201)
async def start_shift(
    body: ShiftRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    """Go on duty. 409 if already on duty in this server."""
    return APIResponse(message="Shift started", data=await cases.start_shift(ctx, body.server_id))


@router.post("/end", response_model=APIResponse[dict])
async def end_shift(
    body: ShiftRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    shift = await cases.end_shift(ctx, body.server_id, body.moderator_id)
    return APIResponse(message="Shift ended", data=shift)


__all__ = ["router"]
