"""
RoMod - Ban Lifecycle Tests
===========================

Issue, supersede, unban and expiry of bans through the case service.
"""

import asyncio
import time

import pytest

from src.core.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from src.core.database import is_ban_active


def _expire(db, ban_id, seconds_ago=10):
    """Push a ban's expiry into the past."""
    db.execute(
        "UPDATE bans SET expires_at = ? WHERE id = ?",
        (time.time() - seconds_ago, ban_id),
    )


# =============================================================================
# Issue
# =============================================================================

class TestIssueBan:
    """Tests for issuing bans."""

    @pytest.mark.asyncio
    async def test_permanent_ban_is_active(self, bare_service, ctx, test_db):
        ban = await bare_service.issue_ban(ctx, "100", "42", "permanent", "Exploiting")

        assert ban["active"] is True
        assert ban["expires_at"] is None
        assert ban["issued_by"] == "mod-1"
        assert test_db.get_active_ban("100", "42")["id"] == ban["id"]

    @pytest.mark.asyncio
    async def test_temporary_ban_sets_expiry(self, bare_service, ctx):
        before = time.time()
        ban = await bare_service.issue_ban(ctx, "100", "42", "temporary", "Spam", duration="1d")

        assert ban["expires_at"] >= before + 86400
        assert ban["expires_at"] <= time.time() + 86400

    @pytest.mark.asyncio
    async def test_temporary_ban_needs_duration(self, bare_service, ctx):
        with pytest.raises(ValidationError):
            await bare_service.issue_ban(ctx, "100", "42", "temporary", "Spam")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("duration", [0.5, 0.999, 0])
    async def test_temporary_ban_rejects_sub_second_duration(self, bare_service, ctx, test_db, duration):
        with pytest.raises(ValidationError):
            await bare_service.issue_ban(ctx, "100", "42", "temporary", "Spam", duration=duration)

        assert test_db.get_active_ban("100", "42") is None

    @pytest.mark.asyncio
    async def test_fractional_duration_truncates(self, bare_service, ctx):
        ban = await bare_service.issue_ban(ctx, "100", "42", "temporary", "Spam", duration=90.9)

        assert ban["expires_at"] is not None
        assert ban["expires_at"] - ban["issued_at"] == pytest.approx(90, abs=1)

    @pytest.mark.asyncio
    async def test_permanent_ban_rejects_duration(self, bare_service, ctx):
        with pytest.raises(ValidationError):
            await bare_service.issue_ban(ctx, "100", "42", "permanent", "Spam", duration="1d")

    @pytest.mark.asyncio
    async def test_empty_reason_rejected(self, bare_service, ctx):
        with pytest.raises(ValidationError):
            await bare_service.issue_ban(ctx, "100", "42", "permanent", "   ")

    @pytest.mark.asyncio
    async def test_unknown_kind_rejected(self, bare_service, ctx):
        with pytest.raises(ValidationError):
            await bare_service.issue_ban(ctx, "100", "42", "kick", "Spam")

    @pytest.mark.asyncio
    async def test_out_of_scope_server_is_not_found(self, bare_service, ctx):
        with pytest.raises(NotFoundError):
            await bare_service.issue_ban(ctx, "300", "42", "permanent", "Spam")

    @pytest.mark.asyncio
    async def test_new_ban_supersedes_active_ban(self, bare_service, ctx, test_db, publisher):
        first = await bare_service.issue_ban(ctx, "100", "42", "permanent", "First")
        second = await bare_service.issue_ban(ctx, "100", "42", "temporary", "Second", duration="2h")

        old = test_db.get_ban(first["id"])
        assert old["active"] is False
        assert old["deactivation_reason"] == "superseded"
        assert test_db.get_active_ban("100", "42")["id"] == second["id"]
        assert ("ban", first["id"], "deactivated") in publisher.kinds()
        assert publisher.kinds()[-1] == ("ban", second["id"], "created")

    @pytest.mark.asyncio
    async def test_bans_in_different_servers_coexist(self, bare_service, ctx, test_db):
        await bare_service.issue_ban(ctx, "100", "42", "permanent", "A")
        await bare_service.issue_ban(ctx, "200", "42", "permanent", "B")

        assert test_db.get_active_ban("100", "42") is not None
        assert test_db.get_active_ban("200", "42") is not None

    @pytest.mark.asyncio
    async def test_warning_is_stored_inactive(self, bare_service, ctx, test_db):
        ban = await bare_service.issue_ban(ctx, "100", "42", "permanent", "Ban")
        warning = await bare_service.issue_ban(ctx, "100", "42", "warning", "Be nice")

        assert warning["active"] is False
        assert test_db.get_ban(ban["id"])["active"] is True

    @pytest.mark.asyncio
    async def test_expired_ban_is_swept_not_superseded(self, bare_service, ctx, test_db):
        old = await bare_service.issue_ban(ctx, "100", "42", "temporary", "Old", duration="1h")
        _expire(test_db, old["id"])

        await bare_service.issue_ban(ctx, "100", "42", "permanent", "New")

        assert test_db.get_ban(old["id"])["deactivation_reason"] == "expired"

    @pytest.mark.asyncio
    async def test_concurrent_issues_leave_one_active(self, bare_service, ctx, test_db):
        await asyncio.gather(*(
            bare_service.issue_ban(ctx, "100", "42", "permanent", f"Reason {i}")
            for i in range(5)
        ))

        active = test_db.fetchall(
            "SELECT id FROM bans WHERE server_id = '100' AND player_id = '42' AND active = 1",
        )
        assert len(active) == 1

    def test_unique_index_blocks_second_active_row(self, test_db):
        """The partial unique index backs up the supersede logic."""
        test_db.insert_ban("100", "42", "permanent", "A", "mod-1")
        with pytest.raises(Exception):
            test_db.execute(
                """INSERT INTO bans (id, server_id, player_id, reason, kind, issued_by,
                                     issued_at, active, evidence, metadata, updated_at)
                   VALUES ('dup', '100', '42', 'B', 'permanent', 'mod-1', 0, 1, '[]', '{}', 0)""",
            )


# =============================================================================
# Unban
# =============================================================================

class TestUnban:
    """Tests for lifting bans."""

    @pytest.mark.asyncio
    async def test_unban_deactivates(self, bare_service, ctx, test_db, publisher):
        ban = await bare_service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        publisher.clear()

        lifted = await bare_service.unban(ctx, ban["id"], note="Served time")

        assert lifted["active"] is False
        assert lifted["deactivation_reason"] == "unban"
        assert lifted["unban_note"] == "Served time"
        assert lifted["deactivated_by"] == "mod-1"
        assert publisher.kinds() == [("ban", ban["id"], "deactivated")]

    @pytest.mark.asyncio
    async def test_unban_twice_is_invalid_state(self, bare_service, ctx):
        ban = await bare_service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        await bare_service.unban(ctx, ban["id"])

        with pytest.raises(InvalidStateError):
            await bare_service.unban(ctx, ban["id"])

    @pytest.mark.asyncio
    async def test_unban_expired_is_invalid_state(self, bare_service, ctx, test_db):
        ban = await bare_service.issue_ban(ctx, "100", "42", "temporary", "Spam", duration="1h")
        _expire(test_db, ban["id"])

        with pytest.raises(InvalidStateError):
            await bare_service.unban(ctx, ban["id"])

    @pytest.mark.asyncio
    async def test_unban_missing_is_not_found(self, bare_service, ctx):
        with pytest.raises(NotFoundError):
            await bare_service.unban(ctx, "no-such-ban")

    @pytest.mark.asyncio
    async def test_unban_out_of_scope_is_not_found(self, bare_service, ctx, other_ctx):
        ban = await bare_service.issue_ban(ctx, "100", "42", "permanent", "Spam")

        with pytest.raises(NotFoundError):
            await bare_service.unban(other_ctx, ban["id"])


# =============================================================================
# Expiry & Listing
# =============================================================================

class TestExpiry:
    """Tests for derived and swept expiry."""

    @pytest.mark.asyncio
    async def test_expired_ban_reads_inactive_before_sweep(self, bare_service, ctx, test_db):
        ban = await bare_service.issue_ban(ctx, "100", "42", "temporary", "Spam", duration="1h")
        _expire(test_db, ban["id"])

        stored = test_db.get_ban(ban["id"])
        assert stored["active"] is True
        assert is_ban_active(stored) is False
        assert test_db.get_active_ban("100", "42") is None

    @pytest.mark.asyncio
    async def test_sweep_stores_inactive_flag(self, bare_service, ctx, test_db, publisher):
        ban = await bare_service.issue_ban(ctx, "100", "42", "temporary", "Spam", duration="1h")
        _expire(test_db, ban["id"])
        publisher.clear()

        swept = await bare_service.sweep_expired_bans(ctx)

        assert [b["id"] for b in swept] == [ban["id"]]
        assert test_db.get_ban(ban["id"])["active"] is False
        assert publisher.kinds() == [("ban", ban["id"], "deactivated")]

    @pytest.mark.asyncio
    async def test_sweep_ignores_servers_outside_scope(self, bare_service, ctx, other_ctx, test_db):
        ban = await bare_service.issue_ban(ctx, "100", "42", "temporary", "Spam", duration="1h")
        _expire(test_db, ban["id"])

        assert await bare_service.sweep_expired_bans(other_ctx) == []
        assert test_db.get_ban(ban["id"])["active"] is True


class TestListBans:
    """Tests for scoped ban listing."""

    @pytest.mark.asyncio
    async def test_list_is_scoped(self, bare_service, ctx, other_ctx):
        await bare_service.issue_ban(ctx, "100", "1", "permanent", "A")
        await bare_service.issue_ban(ctx, "200", "2", "permanent", "B")

        result = await bare_service.list_bans(ctx)
        assert result["total"] == 2

        result = await bare_service.list_bans(ctx, server_ids=["200", "300"])
        assert [b["server_id"] for b in result["items"]] == ["200"]

        result = await bare_service.list_bans(other_ctx)
        assert result == {"items": [], "total": 0}

    @pytest.mark.asyncio
    async def test_active_only_filter(self, bare_service, ctx):
        ban = await bare_service.issue_ban(ctx, "100", "1", "permanent", "A")
        await bare_service.issue_ban(ctx, "100", "2", "permanent", "B")
        await bare_service.unban(ctx, ban["id"])

        result = await bare_service.list_bans(ctx, active_only=True)
        assert [b["player_id"] for b in result["items"]] == ["2"]

    @pytest.mark.asyncio
    async def test_get_ban_out_of_scope(self, bare_service, ctx, other_ctx):
        ban = await bare_service.issue_ban(ctx, "100", "1", "permanent", "A")

        assert (await bare_service.get_ban(ctx, ban["id"]))["id"] == ban["id"]
        with pytest.raises(NotFoundError):
            await bare_service.get_ban(other_ctx, ban["id"])


class TestConflicts:
    """Store-level conflict reporting."""

    def test_insert_ban_integrity_error_is_conflict(self, test_db, monkeypatch):
        """A lost race on the unique index surfaces as ConflictError."""
        import sqlite3

        def boom():
            raise sqlite3.IntegrityError("UNIQUE constraint failed")

        class _Tx:
            def __enter__(self):
                boom()

            def __exit__(self, *exc):
                return False

        monkeypatch.setattr(test_db, "transaction", lambda: _Tx())
        with pytest.raises(ConflictError):
            test_db.insert_ban("100", "42", "permanent", "A", "mod-1")
