"""
RoMod - Configuration Module
============================

Centralized configuration management with environment variable validation.

DESIGN:
    Single source of truth for process-wide settings, loaded from
    environment variables at startup. Per-server settings (channels,
    Roblox credentials) live in the database and are modelled by
    src.core.server_settings instead.

    Key patterns:
    - Singleton via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from src.core.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    RELAY_MAX_ATTEMPTS,
    RELAY_BASE_DELAY,
    RELAY_MAX_DELAY,
    REALTIME_RECONNECT_DELAY,
)


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Process configuration loaded from environment variables.

    Attributes:
        discord_token: Bot token used to post log embeds. Chat logging is
            disabled when unset.
        database_path: SQLite file, defaults to data/romod.db.
        page_size: Default aggregator page size.
        relay_max_attempts: Total attempts per relay call.
        relay_base_delay: First backoff delay in seconds.
        relay_max_delay: Cap on any single backoff delay.
        reconnect_delay: Fixed delay for realtime client reconnects.
    """

    # -------------------------------------------------------------------------
    # Optional: Discord
    # -------------------------------------------------------------------------

    discord_token: Optional[str] = None

    # -------------------------------------------------------------------------
    # Optional: Storage
    # -------------------------------------------------------------------------

    database_path: Optional[Path] = None

    # -------------------------------------------------------------------------
    # Optional: Aggregator
    # -------------------------------------------------------------------------

    page_size: int = DEFAULT_PAGE_SIZE

    # -------------------------------------------------------------------------
    # Optional: Relay
    # -------------------------------------------------------------------------

    relay_max_attempts: int = RELAY_MAX_ATTEMPTS
    relay_base_delay: float = RELAY_BASE_DELAY
    relay_max_delay: float = RELAY_MAX_DELAY

    # -------------------------------------------------------------------------
    # Optional: Realtime
    # -------------------------------------------------------------------------

    reconnect_delay: float = REALTIME_RECONNECT_DELAY

    # -------------------------------------------------------------------------
    # Optional: Webhooks
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Color palette for Discord log embeds."""

    GREEN = 0x1F5E2E
    GOLD = 0xE6B84A
    RED = 0xDC3545
    BLUE = 0x3498DB
    PURPLE = 0x9B59B6
    ORANGE = 0xFF9800

    # Semantic aliases
    BAN = RED           # 🔨 Bans issued
    WARNING = GOLD      # ⚠️ Warnings issued
    UNBAN = GREEN       # 🔓 Unbans and approved appeals
    APPEAL = PURPLE     # 📨 Appeal submissions and denials
    REPORT = ORANGE     # 🚩 Player reports
    INFO = BLUE


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Raises:
        ConfigValidationError: If value is set but not an integer or out of range.
    """
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ConfigValidationError(f"Invalid integer for {name}: {value}")
    if min_val is not None and parsed < min_val:
        raise ConfigValidationError(f"{name}={parsed} below minimum {min_val}")
    if max_val is not None and parsed > max_val:
        raise ConfigValidationError(f"{name}={parsed} above maximum {max_val}")
    return parsed


def _parse_float_with_default(
    value: Optional[str],
    default: float,
    name: str,
    min_val: float = 0.0,
) -> float:
    """
    Parse optional non-negative float with default.

    Raises:
        ConfigValidationError: If value is set but not a number or below min_val.
    """
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise ConfigValidationError(f"Invalid number for {name}: {value}")
    if parsed < min_val:
        raise ConfigValidationError(f"{name}={parsed} below minimum {min_val}")
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """Return the URL if it looks like http(s), None otherwise."""
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from src.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object.

    Raises:
        ConfigValidationError: If any variable is set to an invalid value.
    """
    db_path = os.getenv("ROMOD_DB_PATH")

    return Config(
        discord_token=os.getenv("DISCORD_TOKEN") or None,
        database_path=Path(db_path) if db_path else None,
        page_size=_parse_int_with_default(
            os.getenv("ROMOD_PAGE_SIZE"), DEFAULT_PAGE_SIZE, "ROMOD_PAGE_SIZE",
            min_val=1, max_val=MAX_PAGE_SIZE,
        ),
        relay_max_attempts=_parse_int_with_default(
            os.getenv("RELAY_MAX_ATTEMPTS"), RELAY_MAX_ATTEMPTS, "RELAY_MAX_ATTEMPTS",
            min_val=1, max_val=10,
        ),
        relay_base_delay=_parse_float_with_default(
            os.getenv("RELAY_BASE_DELAY"), RELAY_BASE_DELAY, "RELAY_BASE_DELAY",
        ),
        relay_max_delay=_parse_float_with_default(
            os.getenv("RELAY_MAX_DELAY"), RELAY_MAX_DELAY, "RELAY_MAX_DELAY",
        ),
        reconnect_delay=_parse_float_with_default(
            os.getenv("REALTIME_RECONNECT_DELAY"), REALTIME_RECONNECT_DELAY, "REALTIME_RECONNECT_DELAY",
        ),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> Config:
    """Validate configuration and log a summary at startup."""
    from src.core.logger import logger

    config = get_config()

    if config.error_webhook_url:
        logger.set_webhook(config.error_webhook_url)

    logger.tree("Configuration Validated", [
        ("Chat Logging", "Enabled" if config.discord_token else "Disabled"),
        ("Page Size", str(config.page_size)),
        ("Relay Attempts", str(config.relay_max_attempts)),
        ("Relay Base Delay", f"{config.relay_base_delay}s"),
        ("Error Webhook", "Set" if config.error_webhook_url else "Not set"),
    ], emoji="⚙️")

    return config


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "EmbedColors",
    "ConfigValidationError",
    "load_config",
    "get_config",
    "validate_and_log_config",
]
