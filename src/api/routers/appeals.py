"""
RoMod - Appeals Router
======================

Ban appeal submission and review endpoints.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.core.logger import logger
from src.core.scope import StaffContext
from src.api.dependencies import get_cases, require_staff, get_pagination, PaginationParams
from src.api.models.base import APIResponse, PaginatedResponse
from src.api.models.requests import ReviewAppealRequest, SubmitAppealRequest
from src.api.utils.pagination import create_paginated_response
from src.services.cases import CaseService


router = APIRouter(prefix="/appeals", tags=["Appeals"])


# =============================================================================
# List & Lookup
# =============================================================================

@router.get("", response_model=PaginatedResponse[dict])
async def list_appeals(
    pagination: PaginationParams = Depends(get_pagination),
    server_id: Optional[List[str]] = Query(None, description="Restrict to these servers"),
    status: Optional[str] = Query(None, description="pending, approved or denied"),
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> PaginatedResponse[dict]:
    """List appeals, pending first."""
    appeals = await cases.list_appeals(
        ctx,
        server_ids=server_id,
        status=status,
        limit=pagination.per_page,
        offset=pagination.offset,
    )

    logger.debug("Appeals Listed", [
        ("Staff", ctx.staff_id),
        ("Page", str(pagination.page)),
        ("Results", str(len(appeals))),
    ])

    return create_paginated_response(appeals, None, pagination)


@router.get("/{appeal_id}", response_model=APIResponse[dict])
async def get_appeal(
    appeal_id: str,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    appeal = await cases.get_appeal(ctx, appeal_id)
    return APIResponse(data=appeal)


# =============================================================================
# Actions
# =============================================================================

@router.post("", response_model=APIResponse[dict], status_code=201)
async def submit_appeal(
    body: SubmitAppealRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    appeal = await cases.submit_appeal(ctx, body.ban_id, body.submitter_id, body.text)
    return APIResponse(message="Appeal submitted", data=appeal)


@router.post("/{appeal_id}/review", response_model=APIResponse[dict])
async def review_appeal(
    appeal_id: str,
    body: ReviewAppealRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    """Approve (lifts the ban) or deny an appeal."""
    appeal = await cases.review_appeal(ctx, appeal_id, body.decision, note=body.note)
    return APIResponse(message=f"Appeal {appeal['status']}", data=appeal)


__all__ = ["router"]
