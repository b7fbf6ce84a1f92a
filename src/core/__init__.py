"""
RoMod - Core Package
====================

Configuration, logging, error taxonomy, scope and persistence.

DESIGN:
    Core modules expose singletons or global instances so state is
    consistent across the application:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .config import (
    Config,
    ConfigValidationError,
    EmbedColors,
    get_config,
)
from .errors import (
    CaseError,
    ValidationError,
    ConflictError,
    NotFoundError,
    InvalidStateError,
    RelayFailure,
    RelayRejected,
)
from .logger import logger, TreeLogger, NY_TZ
from .scope import StaffContext


__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "get_config",
    # Errors
    "CaseError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "InvalidStateError",
    "RelayFailure",
    "RelayRejected",
    # Logger
    "logger",
    "TreeLogger",
    "NY_TZ",
    # Scope
    "StaffContext",
]
