"""
RoMod - Per-Server Settings
===========================

Typed settings for one Discord server, stored as JSON in the servers table.

DESIGN:
    Each feature area gets its own section with explicit optional
    fields. Unknown keys are rejected so a typo in the dashboard form
    fails at the boundary instead of silently disabling a feature.
    Discord channel ids are kept as strings (snowflakes overflow JS
    numbers on the dashboard side).

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from src.core.errors import ValidationError


# =============================================================================
# Sections
# =============================================================================

class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


def _snowflake(value: Optional[str]) -> Optional[str]:
    # Channel ids go straight into Discord API paths
    if value is not None and not value.isdigit():
        raise ValueError("channel ids must be numeric Discord snowflakes")
    return value


class ReportSettings(_Section):
    """Player report intake."""

    log_channel_id: Optional[str] = None

    check_channel = field_validator("log_channel_id")(_snowflake)


class AppealSettings(_Section):
    """Ban appeal intake."""

    enabled: bool = True
    log_channel_id: Optional[str] = None

    check_channel = field_validator("log_channel_id")(_snowflake)


class TicketSettings(_Section):
    """Support tickets."""

    enabled: bool = True
    categories: List[str] = Field(default_factory=lambda: ["general"])


class RobloxSettings(_Section):
    """Open Cloud credentials used to enforce bans in-game."""

    api_key: Optional[str] = None
    universe_id: Optional[str] = None
    exclude_alt_accounts: bool = False

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.universe_id)

    @field_validator("universe_id")
    @classmethod
    def check_universe(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.isdigit():
            raise ValueError("universe_id must be numeric")
        return value


class LoggingSettings(_Section):
    """Where relay log embeds are posted."""

    mod_log_channel_id: Optional[str] = None

    check_channel = field_validator("mod_log_channel_id")(_snowflake)


# =============================================================================
# Root Settings
# =============================================================================

class ServerSettings(_Section):
    """All settings for one server."""

    reports: ReportSettings = Field(default_factory=ReportSettings)
    appeals: AppealSettings = Field(default_factory=AppealSettings)
    tickets: TicketSettings = Field(default_factory=TicketSettings)
    roblox: RobloxSettings = Field(default_factory=RobloxSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def parse(cls, data: Optional[Dict[str, Any]]) -> "ServerSettings":
        """
        Validate raw settings from the API or database.

        Raises:
            ValidationError: With pydantic's error list in details.
        """
        try:
            return cls.model_validate(data or {})
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid server settings",
                {"errors": [
                    {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                    for err in e.errors()
                ]},
            )

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "ServerSettings":
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, ValueError):
            raise ValidationError("Stored server settings are not valid JSON")
        return cls.parse(data)

    def to_json(self) -> str:
        return self.model_dump_json()

    def redacted(self) -> Dict[str, Any]:
        """Dump for API responses with the Roblox key masked."""
        data = self.model_dump()
        if data["roblox"]["api_key"]:
            data["roblox"]["api_key"] = "****"
        return data


__all__ = [
    "ServerSettings",
    "ReportSettings",
    "AppealSettings",
    "TicketSettings",
    "RobloxSettings",
    "LoggingSettings",
]
