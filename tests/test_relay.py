"""
RoMod - Enforcement Relay Tests
===============================

Background relay of bans to the game platform and the chat log.
"""

import pytest

from src.core.errors import RelayRejected
from src.core.server_settings import RobloxSettings
from src.services.relay import EnforcementAction, LogMessage, RelayJob, RobloxCloudClient, build_embed
from src.services.relay.gateway import EnforcementRelayGateway
from tests.conftest import FakeChatLogger, FakeEnforcer, RecordingPublisher


class TestBanRelay:
    """Tests for relaying ban transitions."""

    @pytest.mark.asyncio
    async def test_ban_delivered(self, service, relay, ctx, configured_server, enforcer, chat_logger, test_db):
        ban = await service.issue_ban(ctx, "100", "42", "temporary", "Spam", duration="2h")
        await relay.join()

        assert len(enforcer.calls) == 1
        settings, action = enforcer.calls[0]
        assert settings.universe_id == "987654"
        assert action == EnforcementAction(
            player_id="42", action="ban", duration_seconds=7200, reason="Spam",
        )
        assert test_db.get_ban(ban["id"])["relay_status"] == "delivered"
        assert chat_logger.posts[0][0] == "555"

    @pytest.mark.asyncio
    async def test_unban_relays_unban(self, service, relay, ctx, configured_server, enforcer):
        ban = await service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        await service.unban(ctx, ban["id"])
        await relay.join()

        assert [a.action for _, a in enforcer.calls] == ["ban", "unban"]

    @pytest.mark.asyncio
    async def test_appeal_approval_relays_unban(self, service, relay, ctx, configured_server, enforcer, chat_logger):
        ban = await service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        appeal = await service.submit_appeal(ctx, ban["id"], "42", "Sorry")
        await service.review_appeal(ctx, appeal["id"], "approved")
        await relay.join()

        assert [a.action for _, a in enforcer.calls] == ["ban", "unban"]
        # Appeal logs go to the appeals channel
        assert "666" in [channel for channel, _ in chat_logger.posts]

    @pytest.mark.asyncio
    async def test_denied_appeal_logs_only(self, service, relay, ctx, configured_server, enforcer, chat_logger):
        ban = await service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        appeal = await service.submit_appeal(ctx, ban["id"], "42", "Sorry")
        await relay.join()
        chat_logger.posts.clear()

        await service.review_appeal(ctx, appeal["id"], "denied")
        await relay.join()

        assert len(enforcer.calls) == 1
        assert [channel for channel, _ in chat_logger.posts] == ["666"]

    @pytest.mark.asyncio
    async def test_warning_is_log_only(self, service, relay, ctx, configured_server, enforcer, chat_logger, test_db):
        warning = await service.issue_ban(ctx, "100", "42", "warning", "Careful")
        await relay.join()

        assert enforcer.calls == []
        assert len(chat_logger.posts) == 1
        assert test_db.get_ban(warning["id"])["relay_status"] == "skipped"

    @pytest.mark.asyncio
    async def test_unconfigured_server_skipped(self, service, relay, ctx, enforcer, test_db):
        ban = await service.issue_ban(ctx, "200", "42", "permanent", "Spam")
        await relay.join()

        assert enforcer.calls == []
        assert test_db.get_ban(ban["id"])["relay_status"] == "skipped"


class TestRetryAndFailure:
    """Tests for retry, failure recording and isolation from the commit."""

    @pytest.mark.asyncio
    async def test_transient_failure_retried(self, test_db, ctx, configured_server):
        from src.services.cases import CaseService

        enforcer = FakeEnforcer(fail_times=2)
        publisher = RecordingPublisher()
        relay = EnforcementRelayGateway(
            test_db, enforcer=enforcer, publisher=publisher, max_attempts=3, base_delay=0, max_delay=0,
        )
        service = CaseService(test_db, publisher=publisher, relay=relay)

        ban = await service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        await relay.join()

        assert len(enforcer.calls) == 3
        assert test_db.get_ban(ban["id"])["relay_status"] == "delivered"

    @pytest.mark.asyncio
    async def test_exhausted_retries_mark_failed(self, test_db, ctx, configured_server):
        from src.services.cases import CaseService

        enforcer = FakeEnforcer(fail_times=10)
        publisher = RecordingPublisher()
        relay = EnforcementRelayGateway(
            test_db, enforcer=enforcer, publisher=publisher, max_attempts=3, base_delay=0, max_delay=0,
        )
        service = CaseService(test_db, publisher=publisher, relay=relay)

        ban = await service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        await relay.join()

        stored = test_db.get_ban(ban["id"])
        assert len(enforcer.calls) == 3
        assert stored["relay_status"] == "failed"
        assert "503" in stored["relay_error"]
        # Ban itself stays in force
        assert stored["active"] is True
        assert publisher.kinds()[-1] == ("ban", ban["id"], "relay_failed")

    @pytest.mark.asyncio
    async def test_non_retryable_error_fails_fast(self, test_db, ctx, configured_server):
        enforcer = FakeEnforcer(fail_times=10, error=ValueError("bad payload"))
        relay = EnforcementRelayGateway(test_db, enforcer=enforcer, max_attempts=3, base_delay=0)
        ban, _ = test_db.insert_ban("100", "42", "permanent", "Spam", "mod-1")

        relay.submit(RelayJob(
            server_id="100",
            ban_id=ban["id"],
            enforcement=EnforcementAction(player_id="42", action="ban"),
        ))
        await relay.join()

        assert len(enforcer.calls) == 1
        assert test_db.get_ban(ban["id"])["relay_status"] == "failed"

    @pytest.mark.asyncio
    async def test_chat_log_failure_does_not_fail_ban(self, test_db, ctx, configured_server):
        from src.services.cases import CaseService

        relay = EnforcementRelayGateway(
            test_db,
            enforcer=FakeEnforcer(),
            chat_logger=FakeChatLogger(fail=True),
            max_attempts=2,
            base_delay=0,
        )
        service = CaseService(test_db, relay=relay)

        ban = await service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        await relay.join()

        assert test_db.get_ban(ban["id"])["relay_status"] == "delivered"

    @pytest.mark.asyncio
    async def test_submit_failure_does_not_fail_action(self, service, relay, ctx, monkeypatch):
        def broken(job):
            raise RuntimeError("queue gone")

        monkeypatch.setattr(relay, "submit", broken)

        ban = await service.issue_ban(ctx, "100", "42", "permanent", "Spam")
        assert ban["active"] is True

    @pytest.mark.asyncio
    async def test_close_cancels_pending(self, test_db, configured_server):
        relay = EnforcementRelayGateway(test_db, enforcer=FakeEnforcer(fail_times=10), base_delay=60)
        ban, _ = test_db.insert_ban("100", "42", "permanent", "Spam", "mod-1")
        relay.submit(RelayJob(
            server_id="100",
            ban_id=ban["id"],
            enforcement=EnforcementAction(player_id="42", action="ban"),
        ))

        await relay.close()

        assert relay.pending == 0


class FakeResponse:
    """aiohttp response stand-in usable as an async context manager."""

    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self.body = body

    async def text(self) -> str:
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc) -> bool:
        return False


class FakeSession:
    """Answers every PATCH with the next queued status."""

    def __init__(self, *statuses: int) -> None:
        self.statuses = list(statuses)
        self.requests = []

    def patch(self, url, json=None, headers=None) -> FakeResponse:
        self.requests.append((url, json, headers))
        return FakeResponse(self.statuses.pop(0), "{\"message\": \"denied\"}")


def _roblox_client(monkeypatch, *statuses: int):
    client = RobloxCloudClient()
    session = FakeSession(*statuses)

    async def get_session():
        return session

    monkeypatch.setattr(client, "_get_session", get_session)
    return client, session


class TestRobloxStatusHandling:
    """Tests for how Open Cloud answers are classified."""

    @pytest.mark.asyncio
    async def test_forbidden_is_rejected_once(self, monkeypatch, test_db, configured_server):
        enforcer, session = _roblox_client(monkeypatch, 403, 200)
        relay = EnforcementRelayGateway(test_db, enforcer=enforcer, max_attempts=3, base_delay=0, max_delay=0)
        ban, _ = test_db.insert_ban("100", "42", "permanent", "Spam", "mod-1")

        relay.submit(RelayJob(
            server_id="100",
            ban_id=ban["id"],
            enforcement=EnforcementAction(player_id="42", action="ban"),
        ))
        await relay.join()

        stored = test_db.get_ban(ban["id"])
        assert len(session.requests) == 1
        assert stored["relay_status"] == "failed"
        assert "403" in stored["relay_error"]

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, monkeypatch, test_db, configured_server):
        enforcer, session = _roblox_client(monkeypatch, 503, 429, 200)
        relay = EnforcementRelayGateway(test_db, enforcer=enforcer, max_attempts=3, base_delay=0, max_delay=0)
        ban, _ = test_db.insert_ban("100", "42", "permanent", "Spam", "mod-1")

        relay.submit(RelayJob(
            server_id="100",
            ban_id=ban["id"],
            enforcement=EnforcementAction(player_id="42", action="ban"),
        ))
        await relay.join()

        assert len(session.requests) == 3
        assert test_db.get_ban(ban["id"])["relay_status"] == "delivered"
        url, _, headers = session.requests[0]
        assert url.endswith("/universes/987654/user-restrictions/42")
        assert headers["x-api-key"]

    @pytest.mark.asyncio
    async def test_unconfigured_is_rejected(self):
        with pytest.raises(RelayRejected):
            await RobloxCloudClient().apply(RobloxSettings(), EnforcementAction(player_id="42", action="ban"))


class TestRobloxPayload:
    """Tests for the Open Cloud request body."""

    def test_ban_payload(self):
        settings = RobloxSettings(api_key="k", universe_id="1", exclude_alt_accounts=True)
        action = EnforcementAction(player_id="42", action="ban", duration_seconds=3600, reason="Spam")

        payload = RobloxCloudClient.build_payload(settings, action)

        assert payload == {"gameJoinRestriction": {
            "active": True,
            "privateReason": "Spam",
            "displayReason": "Spam",
            "excludeAltAccounts": True,
            "duration": "3600s",
        }}

    def test_unban_payload(self):
        settings = RobloxSettings(api_key="k", universe_id="1")
        action = EnforcementAction(player_id="42", action="unban")

        assert RobloxCloudClient.build_payload(settings, action) == {
            "gameJoinRestriction": {"active": False},
        }


class TestEmbed:
    """Tests for log embed rendering."""

    def test_long_field_truncated(self):
        message = LogMessage(title="Ban", color=0xFF0000, fields=[("Reason", "x" * 2000), ("Empty", "")])

        embed = build_embed(message)

        assert embed.title == "Ban"
        assert len(embed.fields[0].value) == 1024
        assert embed.fields[0].value.endswith("...")
        assert embed.fields[1].value == "None"
