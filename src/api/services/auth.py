"""
RoMod - Auth Service
====================

JWT bearer tokens carrying the staff id and the servers it may act on.

DESIGN:
    Tokens are minted by the identity collaborator (dashboard login).
    This service only verifies the signature and expiry, then trusts
    the claims as-is: `sub` is the staff id and `servers` the scope.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from src.core.logger import logger
from src.core.scope import StaffContext
from src.api.config import get_api_config

TOKEN_TYPE_ACCESS = "access"


class AuthService:
    """Issues and verifies staff access tokens."""

    def __init__(self) -> None:
        self._config = get_api_config()
        if not self._config.jwt_secret:
            logger.warning("JWT Secret Not Set", [
                ("Env", "ROMOD_JWT_SECRET"),
                ("Effect", "Every token will be rejected"),
            ])

    # =========================================================================
    # Token Management
    # =========================================================================

    def generate_token(
        self,
        staff_id: str,
        servers: Iterable[str],
        expires_in: Optional[timedelta] = None,
    ) -> tuple[str, datetime]:
        """Generate a JWT for a staff member and their server scope."""
        now = datetime.now(timezone.utc)
        expires_at = now + (expires_in or timedelta(hours=self._config.jwt_expiry_hours))

        payload = {
            "sub": str(staff_id),
            "servers": sorted(str(s) for s in servers),
            "iat": now,
            "exp": expires_at,
            "type": TOKEN_TYPE_ACCESS,
        }

        token = jwt.encode(
            payload,
            self._config.jwt_secret,
            algorithm=self._config.jwt_algorithm,
        )
        return token, expires_at

    def get_staff_context(self, token: str) -> Optional[StaffContext]:
        """
        Decode a token into a staff context.

        Returns:
            None for a missing, malformed, expired or unsigned token.
        """
        if not token or not self._config.jwt_secret:
            return None

        try:
            payload = jwt.decode(
                token,
                self._config.jwt_secret,
                algorithms=[self._config.jwt_algorithm],
            )
        except ExpiredSignatureError:
            logger.debug("Token Expired")
            return None
        except InvalidTokenError as e:
            logger.debug("Token Rejected", [("Error", str(e)[:50])])
            return None

        if payload.get("type", TOKEN_TYPE_ACCESS) != TOKEN_TYPE_ACCESS:
            return None
        sub = payload.get("sub")
        servers = payload.get("servers") or []
        if not sub or not isinstance(servers, list):
            return None

        return StaffContext.create(sub, servers)


# =============================================================================
# Singleton
# =============================================================================

_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get the auth service singleton."""
    global _service
    if _service is None:
        _service = AuthService()
    return _service


def reset_auth_service() -> None:
    """Drop the singleton so the next call re-reads the API config."""
    global _service
    _service = None


__all__ = ["AuthService", "get_auth_service", "reset_auth_service", "TOKEN_TYPE_ACCESS"]
