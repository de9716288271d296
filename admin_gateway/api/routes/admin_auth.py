"""Admin Auth Routes — login, logout and session introspection.

Invariants:
    - Bad credentials → 401 INVALID_CREDENTIALS, answered directly (no exception path)
    - Successful login issues a new session and overwrites any prior session cookie
    - Logout accepts no body and clears the cookie unconditionally; a storage
      failure is reported (503), never masked as success
    - Data service unavailability during login surfaces as its own error, not 401

Design Decisions:
    - Session cookie staged on the injected Response: FastAPI merges it into the
      JSON response returned by the handler
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from admin_gateway.api.dependencies import (
    AdminPrincipal,
    get_auth_service,
    get_cookie_store,
    get_session_manager,
    require_admin,
)
from admin_gateway.api.error_handlers import error_envelope
from admin_gateway.core.errors import ErrorCategory, ErrorSeverity
from admin_gateway.infrastructure.cookie_store import ResponseCookieStore
from admin_gateway.schemas.auth import AuthResult, LoginRequest, SessionInfo
from admin_gateway.services.admin_auth import AdminAuthService
from admin_gateway.services.admin_session import AdminSessionManager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin", tags=["admin-auth"])

ADMIN_HOME = "/admin"
LOGIN_PAGE = "/login"


def _invalid_credentials() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=error_envelope(
            "INVALID_CREDENTIALS", "Invalid username or password",
            ErrorCategory.AUTHENTICATION.value, ErrorSeverity.WARNING,
        ),
    )


@router.post("/login", response_model=AuthResult)
async def login(
    body: LoginRequest,
    auth: AdminAuthService = Depends(get_auth_service),
    manager: AdminSessionManager = Depends(get_session_manager),
    cookies: ResponseCookieStore = Depends(get_cookie_store),
):
    """Verify administrator credentials and open a session."""
    user = await auth.authenticate(body.username, body.password)
    if user is None:
        return _invalid_credentials()
    await manager.create_session(cookies, user.id)
    return AuthResult(url=ADMIN_HOME)


@router.post("/logout", response_model=AuthResult)
async def logout(
    manager: AdminSessionManager = Depends(get_session_manager),
    cookies: ResponseCookieStore = Depends(get_cookie_store),
):
    """Revoke the caller's session and clear its cookie."""
    await manager.destroy_session(cookies)
    return AuthResult(url=LOGIN_PAGE)


@router.get("/session", response_model=SessionInfo)
async def current_session(admin: AdminPrincipal = Depends(require_admin)):
    """Describe the caller's active session (fixed expiry, never extended)."""
    return SessionInfo(
        subject_id=admin.subject_id,
        issued_at=admin.issued_at,
        expires_at=admin.expires_at,
    )
