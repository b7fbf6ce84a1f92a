"""
RoMod - API Dependencies
========================

FastAPI dependency injection utilities.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from src.core.database import DatabaseManager, get_db
from src.core.scope import StaffContext
from src.api.config import get_api_config
from src.api.errors import APIError, ErrorCode
from src.api.services.auth import get_auth_service
from src.services.aggregator import CrossServerAggregator, get_aggregator
from src.services.cases import CaseService, get_case_service


# =============================================================================
# Security
# =============================================================================

security = HTTPBearer(auto_error=False)


# =============================================================================
# Authentication Dependencies
# =============================================================================

async def require_staff(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> StaffContext:
    """
    Require a valid staff token.
    Raises 401 if not authenticated.
    """
    if credentials is None:
        raise APIError(
            ErrorCode.AUTH_MISSING_TOKEN,
            headers={"WWW-Authenticate": "Bearer"},
        )

    ctx = get_auth_service().get_staff_context(credentials.credentials)
    if ctx is None:
        raise APIError(
            ErrorCode.AUTH_INVALID_TOKEN,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return ctx


# =============================================================================
# Service Dependencies
# =============================================================================

def get_cases() -> CaseService:
    return get_case_service()


def get_history() -> CrossServerAggregator:
    return get_aggregator()


def get_store() -> DatabaseManager:
    return get_db()


# =============================================================================
# Pagination Dependencies
# =============================================================================

class PaginationParams:
    """Standard pagination parameters."""

    def __init__(
        self,
        page: int = 1,
        per_page: Optional[int] = None,
    ):
        config = get_api_config()
        if per_page is None:
            per_page = config.default_page_size
        if page < 1:
            page = 1
        if per_page < 1:
            per_page = 1
        if per_page > config.max_page_size:
            per_page = config.max_page_size

        self.page = page
        self.per_page = per_page
        self.offset = (page - 1) * per_page


def get_pagination(
    page: int = 1,
    per_page: Optional[int] = None,
) -> PaginationParams:
    """Get pagination parameters from query string."""
    return PaginationParams(page=page, per_page=per_page)


__all__ = [
    "security",
    "require_staff",
    "get_cases",
    "get_history",
    "get_store",
    "PaginationParams",
    "get_pagination",
]
