"""API Dependencies — per-request wiring and the administrator route guard.

Invariants:
    - require_admin runs before every protected handler; the handler body never
      executes without an ACTIVE session
    - Missing/unknown/malformed session → AuthenticationRequiredError (AUTH_REQUIRED)
    - Expired session → SessionExpiredError (SESSION_EXPIRED)
    - Cache and data service client are app-scoped (created in the lifespan),
      session manager and cookie store are request-scoped

Design Decisions:
    - FastAPI Depends over middleware: the guard composes per-router and tests
      override any link of the chain via app.dependency_overrides
"""

from dataclasses import dataclass
from datetime import datetime

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from admin_gateway.config import Settings, get_settings
from admin_gateway.core.cache_store import CacheStore
from admin_gateway.core.domain_types import SessionState, SubjectId
from admin_gateway.core.errors import AuthenticationRequiredError, SessionExpiredError
from admin_gateway.infrastructure.cookie_store import ResponseCookieStore
from admin_gateway.infrastructure.data_service import ResilientDataServiceClient
from admin_gateway.infrastructure.database import get_db
from admin_gateway.infrastructure.session_repository import SqlSessionRepository
from admin_gateway.services.admin_auth import AdminAuthService
from admin_gateway.services.admin_session import AdminSessionManager
from admin_gateway.services.audit_service import AuditService
from admin_gateway.services.content_service import ContentService


@dataclass(frozen=True)
class AdminPrincipal:
    """The administrator a guarded request runs as."""
    subject_id: SubjectId
    issued_at: datetime
    expires_at: datetime


def get_cache(request: Request) -> CacheStore:
    return request.app.state.cache


def get_data_service(request: Request) -> ResilientDataServiceClient:
    return request.app.state.data_service


def get_session_manager(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AdminSessionManager:
    return AdminSessionManager(
        SqlSessionRepository(db),
        lifetime=settings.admin_session_lifetime,
        cookie_name=settings.admin_session_cookie,
    )


def get_cookie_store(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
) -> ResponseCookieStore:
    return ResponseCookieStore(
        request, response, secure=settings.admin_session_cookie_secure,
    )


def get_auth_service(
    client: ResilientDataServiceClient = Depends(get_data_service),
    settings: Settings = Depends(get_settings),
) -> AdminAuthService:
    return AdminAuthService(client, policy_cost=settings.password_hash_cost)


def get_audit_service(
    client: ResilientDataServiceClient = Depends(get_data_service),
) -> AuditService:
    return AuditService(client)


def get_content_service(
    client: ResilientDataServiceClient = Depends(get_data_service),
    cache: CacheStore = Depends(get_cache),
    audit: AuditService = Depends(get_audit_service),
) -> ContentService:
    return ContentService(client, cache, audit)


async def require_admin(
    cookies: ResponseCookieStore = Depends(get_cookie_store),
    manager: AdminSessionManager = Depends(get_session_manager),
) -> AdminPrincipal:
    """Route guard: admit only requests carrying an ACTIVE admin session."""
    check = await manager.inspect_session(manager.read_token(cookies))
    if check.state is SessionState.EXPIRED:
        raise SessionExpiredError()
    if check.state is not SessionState.ACTIVE or check.record is None:
        raise AuthenticationRequiredError()
    return AdminPrincipal(
        subject_id=check.record.subject_id,
        issued_at=check.record.issued_at,
        expires_at=check.record.expires_at,
    )
