"""
RoMod - Shift Tests
===================

Shift start/end and the action counters recorded against active shifts.
"""

import asyncio

import pytest

from src.core.errors import ConflictError, NotFoundError


class TestShiftLifecycle:
    """Tests for starting and ending shifts."""

    @pytest.mark.asyncio
    async def test_start_and_end(self, bare_service, ctx, publisher):
        shift = await bare_service.start_shift(ctx, "100")

        assert shift["status"] == "active"
        assert shift["moderator_id"] == "mod-1"
        assert shift["metrics"]["actions_count"] == 0

        ended = await bare_service.end_shift(ctx, "100")

        assert ended["status"] == "completed"
        assert ended["end_time"] >= ended["start_time"]
        assert publisher.kinds() == [
            ("shift", shift["id"], "started"),
            ("shift", shift["id"], "ended"),
        ]

    @pytest.mark.asyncio
    async def test_second_active_shift_conflicts(self, bare_service, ctx):
        await bare_service.start_shift(ctx, "100")

        with pytest.raises(ConflictError):
            await bare_service.start_shift(ctx, "100")

    @pytest.mark.asyncio
    async def test_shifts_in_two_servers(self, bare_service, ctx):
        await bare_service.start_shift(ctx, "100")
        other = await bare_service.start_shift(ctx, "200")

        assert other["status"] == "active"

    @pytest.mark.asyncio
    async def test_end_without_active_shift(self, bare_service, ctx):
        with pytest.raises(NotFoundError):
            await bare_service.end_shift(ctx, "100")

    @pytest.mark.asyncio
    async def test_restart_after_end(self, bare_service, ctx):
        first = await bare_service.start_shift(ctx, "100")
        await bare_service.end_shift(ctx, "100")

        second = await bare_service.start_shift(ctx, "100")

        assert second["id"] != first["id"]

    @pytest.mark.asyncio
    async def test_out_of_scope(self, bare_service, other_ctx):
        with pytest.raises(NotFoundError):
            await bare_service.start_shift(other_ctx, "100")


class TestShiftMetrics:
    """Tests for action counting."""

    @pytest.mark.asyncio
    async def test_actions_increment_active_shift(self, bare_service, ctx, test_db):
        shift = await bare_service.start_shift(ctx, "100")

        ban = await bare_service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        await bare_service.issue_ban(ctx, "100", "43", "warning", "Careful")
        await bare_service.unban(ctx, ban["id"])

        metrics = test_db.get_shift(shift["id"])["metrics"]
        assert metrics["actions_count"] == 3
        assert metrics["bans_issued"] == 2

    @pytest.mark.asyncio
    async def test_every_ban_kind_counts_as_issued(self, bare_service, ctx, test_db):
        shift = await bare_service.start_shift(ctx, "100")

        await bare_service.issue_ban(ctx, "100", "42", "permanent", "Exploiting")
        await bare_service.issue_ban(ctx, "100", "43", "temporary", "Spam", duration="1d")
        await bare_service.issue_ban(ctx, "100", "44", "warning", "Careful")

        metrics = test_db.get_shift(shift["id"])["metrics"]
        assert metrics["bans_issued"] == 3
        assert metrics["actions_count"] == 3

    @pytest.mark.asyncio
    async def test_ticket_close_and_report_counted(self, bare_service, ctx, test_db):
        shift = await bare_service.start_shift(ctx, "100")
        ticket = await bare_service.create_ticket(ctx, "100", "42", "Help", "Stuck")
        report = await bare_service.create_report(ctx, "100", "42", "Flying")

        await bare_service.close_ticket(ctx, ticket["id"])
        await bare_service.close_ticket(ctx, ticket["id"])
        await bare_service.review_report(ctx, report["id"], "reviewed")

        metrics = test_db.get_shift(shift["id"])["metrics"]
        assert metrics["tickets_handled"] == 1
        assert metrics["reports_processed"] == 1
        assert metrics["actions_count"] == 2

    @pytest.mark.asyncio
    async def test_completed_shift_is_frozen(self, bare_service, ctx, test_db):
        shift = await bare_service.start_shift(ctx, "100")
        await bare_service.end_shift(ctx, "100")

        assert await bare_service.record_action(shift["id"], "ban") is False
        assert test_db.get_shift(shift["id"])["metrics"]["actions_count"] == 0

    @pytest.mark.asyncio
    async def test_unknown_kind_is_swallowed(self, bare_service, ctx):
        shift = await bare_service.start_shift(ctx, "100")

        assert await bare_service.record_action(shift["id"], "dance") is False

    @pytest.mark.asyncio
    async def test_action_without_shift_still_logged(self, bare_service, ctx):
        ban = await bare_service.issue_ban(ctx, "100", "42", "permanent", "Spam")

        logs = await bare_service.list_moderation_logs(ctx)

        assert len(logs) == 1
        assert logs[0]["action"] == "ban"
        assert logs[0]["target_id"] == ban["id"]
        assert logs[0]["shift_id"] is None

    @pytest.mark.asyncio
    async def test_metric_failure_does_not_fail_action(self, bare_service, ctx, test_db, monkeypatch):
        await bare_service.start_shift(ctx, "100")

        def broken(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(test_db, "increment_shift_metric", broken)

        ban = await bare_service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        assert ban["active"] is True

    @pytest.mark.asyncio
    async def test_active_shift_lookup(self, bare_service, ctx):
        assert await bare_service.get_active_shift(ctx, "100") is None
        shift = await bare_service.start_shift(ctx, "100")

        found = await bare_service.get_active_shift(ctx, "100")

        assert found["id"] == shift["id"]
        listed = await bare_service.list_shifts(ctx, status="active")
        assert [s["id"] for s in listed] == [shift["id"]]


class TestShiftScenarios:
    """End-to-end shift scenarios."""

    @pytest.mark.asyncio
    async def test_three_bans_then_frozen(self, bare_service, ctx, test_db):
        shift = await bare_service.start_shift(ctx, "100")
        for player in ("1", "2", "3"):
            await bare_service.issue_ban(ctx, "100", player, "permanent", "Exploiting")

        ended = await bare_service.end_shift(ctx, "100")
        await bare_service.issue_ban(ctx, "100", "4", "permanent", "Exploiting")

        assert ended["metrics"]["bans_issued"] == 3
        assert ended["metrics"]["actions_count"] == 3
        assert test_db.get_shift(shift["id"])["metrics"] == ended["metrics"]

    @pytest.mark.asyncio
    async def test_concurrent_starts_single_winner(self, bare_service, ctx):
        results = await asyncio.gather(
            *(bare_service.start_shift(ctx, "100") for _ in range(5)),
            return_exceptions=True,
        )

        started = [r for r in results if isinstance(r, dict)]
        assert len(started) == 1
        assert all(isinstance(r, ConflictError) for r in results if not isinstance(r, dict))
