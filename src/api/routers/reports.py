"""
RoMod - Reports Router
======================

Player reports and moderator notes.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.core.scope import StaffContext
from src.api.dependencies import get_cases, require_staff, get_pagination, PaginationParams
from src.api.models.base import APIResponse, PaginatedResponse
from src.api.models.requests import AddNoteRequest, CreateReportRequest, ReviewReportRequest
from src.api.utils.pagination import create_paginated_response
from src.services.cases import CaseService


router = APIRouter(tags=["Reports"])


# =============================================================================
# Reports
# =============================================================================

@router.get("/reports", response_model=PaginatedResponse[dict])
async def list_reports(
    pagination: PaginationParams = Depends(get_pagination),
    server_id: Optional[List[str]] = Query(None, description="Restrict to these servers"),
    status: Optional[str] = Query(None, description="pending, reviewed or dismissed"),
    player_id: Optional[str] = Query(None),
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> PaginatedResponse[dict]:
    reports = await cases.list_reports(
        ctx,
        server_ids=server_id,
        status=status,
        player_id=player_id,
        limit=pagination.per_page,
        offset=pagination.offset,
    )
    return create_paginated_response(reports, None, pagination)


@router.post("/reports", response_model=APIResponse[dict], status_code=201)
async def create_report(
    body: CreateReportRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    report = await cases.create_report(
        ctx,
        server_id=body.server_id,
        player_id=body.player_id,
        reason=body.reason,
        reported_by=body.reported_by,
        evidence=body.evidence,
        player_name=body.player_name,
    )
    return APIResponse(message="Report filed", data=report)


@router.post("/reports/{report_id}/review", response_model=APIResponse[dict])
async def review_report(
    report_id: str,
    body: ReviewReportRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    report = await cases.review_report(ctx, report_id, body.decision, note=body.note)
    return APIResponse(data=report)


# =============================================================================
# Notes
# =============================================================================

@router.post("/notes", response_model=APIResponse[dict], status_code=201)
async def add_note(
    body: AddNoteRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    """Attach a private note to a player in one server."""
    note = await cases.add_note(
        ctx, body.server_id, body.player_id, body.note, important=body.important,
    )
    return APIResponse(message="Note added", data=note)


__all__ = ["router"]
