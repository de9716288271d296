"""Admin Gateway API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map AdminGatewayError → structured JSON responses
    - CORS configured from settings (not hardcoded); credentials allowed so the
      admin UI can send the session cookie
    - Lifespan owns the app-scoped resources: session store engine, an empty
      CacheStore and the data service client; shutdown clears and closes them

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Expired sessions purged once at startup; validation purges lazily afterwards
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admin_gateway.api.error_handlers import register_error_handlers
from admin_gateway.api.routes import admin_audit, admin_auth, admin_content, health
from admin_gateway.config import get_settings
from admin_gateway.core.cache_store import CacheStore
from admin_gateway.core.errors import SessionStorageError
from admin_gateway.infrastructure.data_service import ResilientDataServiceClient
from admin_gateway.infrastructure.database import init_db
from admin_gateway.infrastructure.observability import setup_logging
from admin_gateway.infrastructure.retry_executor import RetryPolicy
from admin_gateway.infrastructure.session_repository import SqlSessionRepository
from admin_gateway.services.admin_session import AdminSessionManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.cache = CacheStore(max_entries=settings.cache_max_entries)
    app.state.data_service = ResilientDataServiceClient(
        settings.data_service_url,
        settings.data_service_key,
        retry_policy=RetryPolicy(
            max_attempts=settings.retry_max_attempts,
            base_delay_ms=settings.retry_base_delay_ms,
            jitter_ms=settings.retry_jitter_ms,
        ),
        timeout_seconds=settings.data_service_timeout_seconds,
    )
    try:
        async with db.session() as session:
            await AdminSessionManager(
                SqlSessionRepository(session),
                lifetime=settings.admin_session_lifetime,
            ).purge_expired()
    except SessionStorageError:
        logger.warning("Startup session purge skipped: session store unavailable")
    logger.info("Admin gateway started")
    yield
    logger.info("Admin gateway shutting down")
    app.state.cache.clear()
    await app.state.data_service.aclose()
    await db.dispose()


app = FastAPI(
    title="Admin Gateway API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes, registered explicitly
app.include_router(health.router)
app.include_router(admin_auth.router)
app.include_router(admin_content.router)
app.include_router(admin_audit.router)

register_error_handlers(app)
