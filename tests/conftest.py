"""
RoMod - Test Fixtures
=====================

Shared fixtures for all tests.
"""

import os
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set up test environment before importing modules
os.environ["TESTING"] = "1"
os.environ.setdefault("ROMOD_JWT_SECRET", "test-secret")

from src.core.database import DatabaseManager
from src.core.errors import RelayFailure
from src.core.scope import StaffContext
from src.core.server_settings import ServerSettings
from src.services.cases import CaseService, ChangeEvent
from src.services.relay import EnforcementRelayGateway


# =============================================================================
# Test Doubles
# =============================================================================

class RecordingPublisher:
    """Collects every change event published."""

    def __init__(self) -> None:
        self.events: List[ChangeEvent] = []

    def publish(self, event: ChangeEvent) -> None:
        self.events.append(event)

    def kinds(self) -> List[Tuple[str, str, str]]:
        return [(e.entity_type.value, e.entity_id, e.change_kind.value) for e in self.events]

    def clear(self) -> None:
        self.events.clear()


class FakeEnforcer:
    """Game platform stand-in. Fails the first `fail_times` calls."""

    def __init__(self, fail_times: int = 0, error: Optional[Exception] = None) -> None:
        self.fail_times = fail_times
        self.error = error or RelayFailure("Roblox API returned 503", status=503)
        self.calls = []

    async def apply(self, settings, action) -> None:
        self.calls.append((settings, action))
        if len(self.calls) <= self.fail_times:
            raise self.error


class FakeChatLogger:
    """Chat platform stand-in."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.posts = []

    async def post(self, channel_id, message) -> None:
        self.posts.append((channel_id, message))
        if self.fail:
            raise RelayFailure("Discord API returned 500", status=500)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_romod.db"


@pytest.fixture
def test_db(temp_db_path):
    """Create a fresh test database instance."""
    DatabaseManager.reset_instance()
    db = DatabaseManager(temp_db_path)

    yield db

    DatabaseManager.reset_instance()


@pytest.fixture
def ctx():
    """Staff member with access to servers 100 and 200."""
    return StaffContext.create("mod-1", ["100", "200"])


@pytest.fixture
def other_ctx():
    """Staff member with access to server 300 only."""
    return StaffContext.create("mod-2", ["300"])


@pytest.fixture
def configured_server(test_db):
    """Server 100 with Roblox credentials and log channels set."""
    settings = ServerSettings.parse({
        "roblox": {"api_key": "rbx-key", "universe_id": "987654"},
        "logging": {"mod_log_channel_id": "555"},
        "appeals": {"log_channel_id": "666"},
    })
    test_db.save_server_settings("100", settings, "Test Server")
    return settings


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def enforcer():
    return FakeEnforcer()


@pytest.fixture
def chat_logger():
    return FakeChatLogger()


@pytest.fixture
def relay(test_db, enforcer, chat_logger, publisher):
    """Relay gateway with zero backoff."""
    return EnforcementRelayGateway(
        test_db,
        enforcer=enforcer,
        chat_logger=chat_logger,
        publisher=publisher,
        max_attempts=3,
        base_delay=0,
        max_delay=0,
    )


@pytest.fixture
def service(test_db, publisher, relay):
    """Case service wired to the recording publisher and fake relay."""
    return CaseService(test_db, publisher=publisher, relay=relay)


@pytest.fixture
def bare_service(test_db, publisher):
    """Case service without a relay gateway."""
    return CaseService(test_db, publisher=publisher)
