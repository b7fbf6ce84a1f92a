"""
RoMod - FastAPI Application
===========================

FastAPI application factory and configuration.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.core.config import validate_and_log_config
from src.core.database import DatabaseManager, get_db
from src.core.errors import CaseError
from src.core.logger import logger
from src.api.config import get_api_config
from src.api.errors import APIError, ErrorCode, case_error_response, error_response
from src.api.services.websocket import get_ws_manager
from src.services.cases import CaseService, set_case_service
from src.services.relay import DiscordLogClient, EnforcementRelayGateway, RobloxCloudClient
from src.api.routers import (
    health_router,
    bans_router,
    appeals_router,
    tickets_router,
    shifts_router,
    reports_router,
    players_router,
    servers_router,
    websocket_router,
)


# =============================================================================
# OpenAPI Documentation
# =============================================================================

API_DESCRIPTION = """
## RoMod Moderation Dashboard API

Case lifecycle and cross-server history for Roblox game moderation.

### Authentication

Every endpoint except `/health` requires a bearer token whose claims name
the staff member (`sub`) and the servers they may act on (`servers`).

```
Authorization: Bearer <access_token>
```

Entities in servers outside the token's scope answer 404.

### WebSocket

Connect to `/api/romod/ws?token=<access_token>`, then send
`{"subscribe": "<server_id>"}`. Every committed change in that server
arrives as a `case.changed` frame naming the entity to refetch.

### Error Responses

```json
{
    "success": false,
    "error_code": "CASE_INVALID_STATE",
    "message": "Ban is not active",
    "details": {"ban_id": "..."}
}
```
"""

OPENAPI_TAGS = [
    {"name": "Health", "description": "Health check and status endpoints"},
    {"name": "Bans", "description": "Issue, lift and list bans"},
    {"name": "Appeals", "description": "Ban appeal submission and review"},
    {"name": "Tickets", "description": "Support ticket system"},
    {"name": "Shifts", "description": "Moderator shifts and the audit log"},
    {"name": "Reports", "description": "Player reports and moderator notes"},
    {"name": "Players", "description": "Cross-server player history"},
    {"name": "Servers", "description": "Per-server settings"},
    {"name": "WebSocket", "description": "Real-time change notifications"},
]


# =============================================================================
# Lifespan
# =============================================================================

def build_relay(db: DatabaseManager, publisher=None) -> EnforcementRelayGateway:
    """Build the relay gateway from process configuration."""
    config = validate_and_log_config()

    chat_logger: Optional[DiscordLogClient] = None
    if config.discord_token:
        chat_logger = DiscordLogClient(config.discord_token)

    return EnforcementRelayGateway(
        db,
        enforcer=RobloxCloudClient(),
        chat_logger=chat_logger,
        publisher=publisher,
        max_attempts=config.relay_max_attempts,
        base_delay=config.relay_base_delay,
        max_delay=config.relay_max_delay,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Wires the store, relay and fan-out into the case service on startup
    and drains them on shutdown.
    """
    logger.tree("API Starting", [
        ("Version", app.version),
        ("Prefix", get_api_config().prefix),
    ], emoji="🚀")

    db = get_db()
    ws_manager = get_ws_manager()
    await ws_manager.start_heartbeat()

    relay = build_relay(db, publisher=ws_manager)
    app.state.relay = relay
    set_case_service(CaseService(db, publisher=ws_manager, relay=relay))

    yield

    logger.tree("API Stopping", [
        ("Pending Relay Jobs", str(relay.pending)),
    ], emoji="🛑")

    await relay.close()
    await ws_manager.stop_heartbeat()
    set_case_service(None)
    app.state.relay = None


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    config = get_api_config()
    prefix = config.prefix

    app = FastAPI(
        title="RoMod API",
        description=API_DESCRIPTION,
        version="1.0.0",
        docs_url=f"{prefix}/docs" if config.debug else None,
        redoc_url=f"{prefix}/redoc" if config.debug else None,
        openapi_url=f"{prefix}/openapi.json" if config.debug else None,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )
    app.state.relay = None

    # ==========================================================================
    # Middleware
    # ==========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=config.cors_allow_credentials,
        allow_methods=list(config.cors_allow_methods),
        allow_headers=list(config.cors_allow_headers),
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Tag each request with an id and log slow or failed ones."""
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        if response.status_code >= 500 or elapsed_ms > 1000:
            logger.warning("Slow Or Failed Request", [
                ("Method", request.method),
                ("Path", str(request.url.path)[:50]),
                ("Status", str(response.status_code)),
                ("Duration", f"{elapsed_ms:.0f}ms"),
                ("Request ID", request_id),
            ])
        else:
            logger.debug("Request", [
                ("Method", request.method),
                ("Path", str(request.url.path)[:50]),
                ("Status", str(response.status_code)),
                ("Duration", f"{elapsed_ms:.0f}ms"),
            ])
        return response

    # ==========================================================================
    # Exception Handlers
    # ==========================================================================

    @app.exception_handler(CaseError)
    async def case_error_handler(request: Request, exc: CaseError):
        logger.debug("Case Error", [
            ("Path", str(request.url.path)[:50]),
            ("Type", type(exc).__name__),
            ("Error", exc.message[:100]),
        ])
        return case_error_response(exc)

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            ErrorCode.VALIDATION_FAILED,
            details={"errors": [
                {"loc": ".".join(str(p) for p in err.get("loc", ())), "msg": err.get("msg", "")}
                for err in exc.errors()
            ]},
        )

    @app.exception_handler(sqlite3.Error)
    async def database_error_handler(request: Request, exc: sqlite3.Error):
        logger.error("Database Error", [
            ("Path", str(request.url.path)[:50]),
            ("Error Type", type(exc).__name__),
            ("Error", str(exc)[:100]),
        ])
        return error_response(ErrorCode.SERVER_DATABASE_ERROR)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions with consistent error format."""
        logger.error("Unhandled API Error", [
            ("Path", str(request.url.path)[:50]),
            ("Method", request.method),
            ("Error Type", type(exc).__name__),
            ("Error", str(exc)[:100]),
        ])

        return error_response(
            ErrorCode.SERVER_ERROR,
            details={"path": str(request.url.path)} if config.debug else None,
        )

    # ==========================================================================
    # Routers
    # ==========================================================================

    app.include_router(health_router, prefix=prefix)
    app.include_router(bans_router, prefix=prefix)
    app.include_router(appeals_router, prefix=prefix)
    app.include_router(tickets_router, prefix=prefix)
    app.include_router(shifts_router, prefix=prefix)
    app.include_router(reports_router, prefix=prefix)
    app.include_router(players_router, prefix=prefix)
    app.include_router(servers_router, prefix=prefix)
    app.include_router(websocket_router, prefix=prefix)

    # Root health check (for load balancers)
    @app.get("/health")
    async def root_health():
        return {"status": "healthy"}

    return app


__all__ = ["create_app", "build_relay", "lifespan"]
