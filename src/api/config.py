"""
RoMod - API Configuration
=========================

Centralized configuration for the FastAPI service.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import os


@dataclass(frozen=True)
class APIConfig:
    """API configuration settings."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8081
    debug: bool = False

    # CORS
    cors_origins: Tuple[str, ...] = ("*",)
    cors_allow_credentials: bool = True
    cors_allow_methods: Tuple[str, ...] = ("*",)
    cors_allow_headers: Tuple[str, ...] = ("*",)

    # Routing
    prefix: str = "/api/romod"

    # JWT Auth
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 24

    # Pagination
    default_page_size: int = 50
    max_page_size: int = 100

    # WebSocket
    ws_heartbeat_interval: int = 30  # seconds
    ws_max_connections: int = 500


def _origins(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ("*",)
    return tuple(o.strip() for o in value.split(",") if o.strip())


def load_api_config() -> APIConfig:
    """Load API configuration from environment."""
    return APIConfig(
        host=os.getenv("ROMOD_API_HOST", "0.0.0.0"),
        port=int(os.getenv("ROMOD_API_PORT", "8081")),
        debug=os.getenv("ROMOD_API_DEBUG", "false").lower() == "true",
        cors_origins=_origins(os.getenv("ROMOD_CORS_ORIGINS")),
        jwt_secret=os.getenv("ROMOD_JWT_SECRET", ""),
        jwt_expiry_hours=int(os.getenv("ROMOD_JWT_EXPIRY_HOURS", "24")),
        ws_max_connections=int(os.getenv("ROMOD_WS_MAX_CONNECTIONS", "500")),
    )


# Singleton instance
_config: Optional[APIConfig] = None


def get_api_config() -> APIConfig:
    """Get the API configuration singleton."""
    global _config
    if _config is None:
        _config = load_api_config()
    return _config


def set_api_config(config: Optional[APIConfig]) -> None:
    """Replace the singleton (tests and embedding)."""
    global _config
    _config = config


__all__ = ["APIConfig", "get_api_config", "load_api_config", "set_api_config"]
