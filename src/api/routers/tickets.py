"""
RoMod - Tickets Router
======================

Support ticket management endpoints.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.core.scope import StaffContext
from src.api.dependencies import get_cases, require_staff, get_pagination, PaginationParams
from src.api.models.base import APIResponse, PaginatedResponse
from src.api.models.requests import CreateTicketRequest, TicketPriorityRequest
from src.api.utils.pagination import create_paginated_response
from src.services.cases import CaseService


router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.get("", response_model=PaginatedResponse[dict])
async def list_tickets(
    pagination: PaginationParams = Depends(get_pagination),
    server_id: Optional[List[str]] = Query(None, description="Restrict to these servers"),
    status: Optional[str] = Query(None, description="open or closed"),
    assigned_to: Optional[str] = Query(None, description="Filter by claimer"),
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> PaginatedResponse[dict]:
    tickets = await cases.list_tickets(
        ctx,
        server_ids=server_id,
        status=status,
        assigned_to=assigned_to,
        limit=pagination.per_page,
        offset=pagination.offset,
    )
    return create_paginated_response(tickets, None, pagination)


@router.get("/{ticket_id}", response_model=APIResponse[dict])
async def get_ticket(
    ticket_id: str,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    return APIResponse(data=await cases.get_ticket(ctx, ticket_id))


@router.post("", response_model=APIResponse[dict], status_code=201)
async def create_ticket(
    body: CreateTicketRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    ticket = await cases.create_ticket(
        ctx,
        server_id=body.server_id,
        submitter_id=body.submitter_id,
        title=body.title,
        description=body.description,
        category=body.category,
        priority=body.priority,
        submitter_name=body.submitter_name,
    )
    return APIResponse(message="Ticket created", data=ticket)


@router.post("/{ticket_id}/claim", response_model=APIResponse[dict])
async def claim_ticket(
    ticket_id: str,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    """Claim an unassigned ticket. 409 if someone else holds it."""
    return APIResponse(message="Ticket claimed", data=await cases.claim_ticket(ctx, ticket_id))


@router.patch("/{ticket_id}/priority", response_model=APIResponse[dict])
async def set_priority(
    ticket_id: str,
    body: TicketPriorityRequest,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    return APIResponse(data=await cases.set_priority(ctx, ticket_id, body.priority))


@router.post("/{ticket_id}/close", response_model=APIResponse[dict])
async def close_ticket(
    ticket_id: str,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    return APIResponse(data=await cases.close_ticket(ctx, ticket_id))


@router.post("/{ticket_id}/reopen", response_model=APIResponse[dict])
async def reopen_ticket(
    ticket_id: str,
    ctx: StaffContext = Depends(require_staff),
    cases: CaseService = Depends(get_cases),
) -> APIResponse[dict]:
    return APIResponse(data=await cases.reopen_ticket(ctx, ticket_id))


__all__ = ["router"]
