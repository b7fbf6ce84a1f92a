"""
RoMod - Ticket Tests
====================

Ticket creation, claiming, priority and the idempotent close/reopen pair.
"""

import asyncio

import pytest

from src.core.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from src.core.scope import StaffContext
from src.core.server_settings import ServerSettings


async def _ticket(service, ctx, **kwargs):
    params = {
        "server_id": "100",
        "submitter_id": "42",
        "title": "Can't join",
        "description": "Getting kicked on join",
    }
    params.update(kwargs)
    return await service.create_ticket(ctx, **params)


class TestCreateTicket:
    """Tests for ticket creation."""

    @pytest.mark.asyncio
    async def test_defaults(self, bare_service, ctx, publisher):
        ticket = await _ticket(bare_service, ctx)

        assert ticket["status"] == "open"
        assert ticket["priority"] == "medium"
        assert ticket["category"] == "general"
        assert ticket["assigned_to"] is None
        assert publisher.kinds() == [("ticket", ticket["id"], "created")]

    @pytest.mark.asyncio
    async def test_bad_priority(self, bare_service, ctx):
        with pytest.raises(ValidationError):
            await _ticket(bare_service, ctx, priority="urgent")

    @pytest.mark.asyncio
    async def test_unknown_category(self, bare_service, ctx):
        with pytest.raises(ValidationError):
            await _ticket(bare_service, ctx, category="billing")

    @pytest.mark.asyncio
    async def test_configured_category(self, bare_service, ctx, test_db):
        test_db.save_server_settings(
            "100", ServerSettings.parse({"tickets": {"categories": ["general", "billing"]}}),
        )

        ticket = await _ticket(bare_service, ctx, category="Billing")

        assert ticket["category"] == "billing"

    @pytest.mark.asyncio
    async def test_tickets_disabled(self, bare_service, ctx, test_db):
        test_db.save_server_settings("100", ServerSettings.parse({"tickets": {"enabled": False}}))

        with pytest.raises(InvalidStateError):
            await _ticket(bare_service, ctx)

    @pytest.mark.asyncio
    async def test_empty_title(self, bare_service, ctx):
        with pytest.raises(ValidationError):
            await _ticket(bare_service, ctx, title="")


class TestClaimTicket:
    """Tests for claiming."""

    @pytest.mark.asyncio
    async def test_claim_assigns(self, bare_service, ctx, publisher):
        ticket = await _ticket(bare_service, ctx)

        claimed = await bare_service.claim_ticket(ctx, ticket["id"])

        assert claimed["assigned_to"] == "mod-1"
        assert publisher.kinds()[-1] == ("ticket", ticket["id"], "claimed")

    @pytest.mark.asyncio
    async def test_second_claim_conflicts(self, bare_service, ctx):
        ticket = await _ticket(bare_service, ctx)
        await bare_service.claim_ticket(ctx, ticket["id"])
        rival = StaffContext.create("mod-3", ["100"])

        with pytest.raises(ConflictError) as exc_info:
            await bare_service.claim_ticket(rival, ticket["id"])

        assert exc_info.value.details["assigned_to"] == "mod-1"

    @pytest.mark.asyncio
    async def test_concurrent_claims_single_winner(self, bare_service, ctx):
        ticket = await _ticket(bare_service, ctx)
        rivals = [StaffContext.create(f"mod-{i}", ["100"]) for i in range(5)]

        results = await asyncio.gather(
            *(bare_service.claim_ticket(rival, ticket["id"]) for rival in rivals),
            return_exceptions=True,
        )

        winners = [r for r in results if isinstance(r, dict)]
        assert len(winners) == 1
        assert all(isinstance(r, ConflictError) for r in results if not isinstance(r, dict))

    @pytest.mark.asyncio
    async def test_claim_out_of_scope(self, bare_service, ctx, other_ctx):
        ticket = await _ticket(bare_service, ctx)

        with pytest.raises(NotFoundError):
            await bare_service.claim_ticket(other_ctx, ticket["id"])


class TestTicketStatus:
    """Tests for priority, close and reopen."""

    @pytest.mark.asyncio
    async def test_priority_change_emits_once(self, bare_service, ctx, publisher):
        ticket = await _ticket(bare_service, ctx)
        publisher.clear()

        updated = await bare_service.set_priority(ctx, ticket["id"], "high")
        await bare_service.set_priority(ctx, ticket["id"], "high")

        assert updated["priority"] == "high"
        assert publisher.kinds() == [("ticket", ticket["id"], "updated")]

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, bare_service, ctx, publisher):
        ticket = await _ticket(bare_service, ctx)
        publisher.clear()

        closed = await bare_service.close_ticket(ctx, ticket["id"])
        again = await bare_service.close_ticket(ctx, ticket["id"])

        assert closed["status"] == "closed"
        assert closed["closed_by"] == "mod-1"
        assert again["status"] == "closed"
        assert publisher.kinds() == [("ticket", ticket["id"], "closed")]

    @pytest.mark.asyncio
    async def test_reopen_clears_close_fields(self, bare_service, ctx):
        ticket = await _ticket(bare_service, ctx)
        await bare_service.close_ticket(ctx, ticket["id"])

        reopened = await bare_service.reopen_ticket(ctx, ticket["id"])

        assert reopened["status"] == "open"
        assert reopened["closed_at"] is None
        assert reopened["closed_by"] is None

    @pytest.mark.asyncio
    async def test_reopen_open_ticket_is_noop(self, bare_service, ctx, publisher):
        ticket = await _ticket(bare_service, ctx)
        publisher.clear()

        result = await bare_service.reopen_ticket(ctx, ticket["id"])

        assert result["status"] == "open"
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_list_filters(self, bare_service, ctx):
        first = await _ticket(bare_service, ctx)
        await _ticket(bare_service, ctx, server_id="200")
        await bare_service.close_ticket(ctx, first["id"])

        open_tickets = await bare_service.list_tickets(ctx, status="open")
        assert [t["server_id"] for t in open_tickets] == ["200"]

        scoped = await bare_service.list_tickets(ctx, server_ids=["100"])
        assert [t["id"] for t in scoped] == [first["id"]]
