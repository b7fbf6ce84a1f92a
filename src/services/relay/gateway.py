"""
RoMod - Enforcement Relay Gateway
=================================

Forwards committed case changes to the game platform and the chat log.

DESIGN:
    Fire-and-forget relative to the case commit. Every job runs as its
    own background task, retries with bounded exponential backoff and
    records the enforcement outcome on the ban (relay_status). Nothing
    here can roll back or fail the moderation action that produced it.
    Dropping in-flight jobs at shutdown is acceptable; operators
    reconcile through relay_status.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Optional, Protocol, Set

from src.core.constants import RELAY_BASE_DELAY, RELAY_MAX_ATTEMPTS, RELAY_MAX_DELAY
from src.core.database import DatabaseManager
from src.core.logger import logger
from src.core.server_settings import RobloxSettings, ServerSettings
from src.services.cases.constants import RELAY_DELIVERED, RELAY_FAILED, RELAY_SKIPPED
from src.services.cases.events import ChangeEvent, ChangeKind, ChangePublisher, EntityType
from src.services.relay.jobs import EnforcementAction, LogMessage, RelayJob
from src.utils.async_utils import create_safe_task, drain_tasks
from src.utils.retry import retry_async


# =============================================================================
# Collaborator Interfaces
# =============================================================================

class Enforcer(Protocol):
    async def apply(self, settings: RobloxSettings, action: EnforcementAction) -> None:
        ...


class ChatLogger(Protocol):
    async def post(self, channel_id: str, message: LogMessage) -> None:
        ...


# =============================================================================
# Gateway
# =============================================================================

class EnforcementRelayGateway:
    """
    Background relay of case changes.

    Attributes:
        max_attempts: Total attempts per external call.
        base_delay: First backoff delay in seconds.
        max_delay: Cap on any single backoff delay.
    """

    def __init__(
        self,
        db: DatabaseManager,
        enforcer: Optional[Enforcer] = None,
        chat_logger: Optional[ChatLogger] = None,
        publisher: Optional[ChangePublisher] = None,
        max_attempts: int = RELAY_MAX_ATTEMPTS,
        base_delay: float = RELAY_BASE_DELAY,
        max_delay: float = RELAY_MAX_DELAY,
    ) -> None:
        self.db = db
        self.enforcer = enforcer
        self.chat_logger = chat_logger
        self.publisher = publisher
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._tasks: Set[asyncio.Task] = set()

        logger.tree("Relay Gateway Initialized", [
            ("Enforcer", type(enforcer).__name__ if enforcer else "None"),
            ("Chat Logger", type(chat_logger).__name__ if chat_logger else "None"),
            ("Attempts", str(max_attempts)),
            ("Base Delay", f"{base_delay}s"),
        ], emoji="📡")

    # =========================================================================
    # Public API
    # =========================================================================

    def submit(self, job: RelayJob) -> asyncio.Task:
        """Schedule a job and return immediately."""
        task = create_safe_task(self._process(job), f"Relay: {job.label}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def join(self) -> None:
        """Wait for every job submitted so far."""
        await drain_tasks(self._tasks)

    async def close(self) -> None:
        """Cancel outstanding jobs and close collaborator sessions."""
        dropped = await drain_tasks(self._tasks, cancel=True)
        if dropped:
            logger.warning("Relay Jobs Dropped", [("Count", str(dropped))])

        for client in (self.enforcer, self.chat_logger):
            close = getattr(client, "close", None)
            if close is not None:
                await close()

    # =========================================================================
    # Processing
    # =========================================================================

    async def _process(self, job: RelayJob) -> None:
        settings = await asyncio.to_thread(self.db.get_server_settings, job.server_id)

        if job.ban_id:
            await self._enforce(job, settings)
        if job.log:
            await self._post_log(job, settings)

    async def _enforce(self, job: RelayJob, settings: ServerSettings) -> None:
        """Apply the in-game action and record the outcome on the ban."""
        if job.enforcement is None or self.enforcer is None or not settings.roblox.configured:
            await asyncio.to_thread(self.db.set_relay_status, job.ban_id, RELAY_SKIPPED)
            logger.debug("Enforcement Skipped", [
                ("Ban ID", job.ban_id),
                ("Server", job.server_id),
            ])
            return

        try:
            await retry_async(
                self.enforcer.apply,
                settings.roblox,
                job.enforcement,
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                max_delay=self.max_delay,
                label=f"Enforce {job.label}",
            )
        except Exception as e:
            await asyncio.to_thread(
                self.db.set_relay_status, job.ban_id, RELAY_FAILED, str(e)[:500],
            )
            logger.error("Enforcement Relay Failed", [
                ("Ban ID", job.ban_id),
                ("Server", job.server_id),
                ("Action", job.enforcement.action),
                ("Error", str(e)[:200]),
            ])
            self._publish_failure(job)
            return

        await asyncio.to_thread(self.db.set_relay_status, job.ban_id, RELAY_DELIVERED)
        logger.tree("Enforcement Relayed", [
            ("Ban ID", job.ban_id),
            ("Player", job.enforcement.player_id),
            ("Action", job.enforcement.action),
        ], emoji="📡")

    async def _post_log(self, job: RelayJob, settings: ServerSettings) -> None:
        """Post the log embed. Failures are logged and swallowed."""
        channel_id = self._resolve_channel(job, settings)
        if self.chat_logger is None or not channel_id:
            return

        try:
            await retry_async(
                self.chat_logger.post,
                channel_id,
                job.log,
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                max_delay=self.max_delay,
                label=f"Log {job.log.title}",
            )
        except Exception as e:
            logger.warning("Chat Log Relay Failed", [
                ("Server", job.server_id),
                ("Channel", channel_id),
                ("Error", str(e)[:200]),
            ])

    @staticmethod
    def _resolve_channel(job: RelayJob, settings: ServerSettings) -> Optional[str]:
        if job.log_channel == "appeals" and settings.appeals.log_channel_id:
            return settings.appeals.log_channel_id
        if job.log_channel == "reports" and settings.reports.log_channel_id:
            return settings.reports.log_channel_id
        return settings.logging.mod_log_channel_id

    def _publish_failure(self, job: RelayJob) -> None:
        if self.publisher is None:
            return
        try:
            self.publisher.publish(ChangeEvent(
                server_id=job.server_id,
                entity_type=EntityType.BAN,
                entity_id=job.ban_id,
                change_kind=ChangeKind.RELAY_FAILED,
            ))
        except Exception as e:
            logger.warning("Relay Failure Event Not Published", [("Error", str(e)[:100])])


__all__ = [
    "Enforcer",
    "ChatLogger",
    "EnforcementRelayGateway",
]
