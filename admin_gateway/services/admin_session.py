"""Admin Session Manager — issues, validates and revokes administrator sessions.

Invariants:
    - States: Unauthenticated → Active → (Expired | Revoked); Active is entered
      only through create_session after a successful credential check
    - At most one active session per client context: create_session revokes
      whatever session the caller's cookie referenced and overwrites the cookie
    - validate/inspect never extend expiry (fixed lifetime, no sliding renewal)
    - Expired records found during validation are purged lazily
    - destroy_session removes the cookie unconditionally and is idempotent
    - Any storage failure surfaces as SessionStorageError, never swallowed or retried

Design Decisions:
    - Cookie access is an explicit CookieStore argument per call, persistence an
      injected SessionRepository: both are mockable, neither is ambient
    - Injected clock: expiry tests move time instead of sleeping
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from admin_gateway.core.domain_types import SessionState, SubjectId
from admin_gateway.core.errors import DatabaseError, ErrorContext, SessionStorageError
from admin_gateway.core.repository_protocols import CookieStore, SessionRepository
from admin_gateway.core import session_policy
from admin_gateway.core.session_policy import AdminSessionRecord

logger = logging.getLogger(__name__)

DEFAULT_COOKIE_NAME = "admin_session"


@dataclass(frozen=True)
class SessionCheck:
    """Result of inspecting a token: state plus the record when ACTIVE."""
    state: SessionState
    record: AdminSessionRecord | None = None

    @property
    def subject_id(self) -> SubjectId | None:
        return self.record.subject_id if self.record else None


class AdminSessionManager:
    """Administrator session lifecycle over a repository and a cookie store."""

    def __init__(
        self,
        repository: SessionRepository,
        *,
        lifetime: timedelta = session_policy.DEFAULT_LIFETIME,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        clock: Callable[[], datetime] = session_policy.utcnow,
    ):
        if lifetime <= timedelta(0):
            raise ValueError("session lifetime must be positive")
        self.repository = repository
        self.lifetime = lifetime
        self.cookie_name = cookie_name
        self.clock = clock

    def read_token(self, cookies: CookieStore) -> str | None:
        return cookies.get(self.cookie_name)

    async def create_session(self, cookies: CookieStore, subject_id: str) -> str:
        """Issue a fresh session for subject_id and stage its cookie."""
        if not subject_id:
            raise ValueError("subject_id is required")
        previous = self.read_token(cookies)
        if session_policy.is_well_formed(previous):
            await self._storage(
                "revoke", self.repository.delete(session_policy.digest_token(previous)),
            )

        token = session_policy.generate_token()
        record = session_policy.issue_record(
            token, subject_id, self.clock(), self.lifetime,
        )
        await self._storage("insert", self.repository.save(record))
        cookies.set(
            self.cookie_name, token,
            max_age=int(self.lifetime.total_seconds()),
        )
        logger.info(
            "Admin session created", extra={"subject_id": subject_id},
        )
        return token

    async def inspect_session(self, token: str | None) -> SessionCheck:
        """Classify token as ACTIVE, EXPIRED or ABSENT."""
        if not session_policy.is_well_formed(token):
            return SessionCheck(SessionState.ABSENT)
        digest = session_policy.digest_token(token)
        record = await self._storage("select", self.repository.get(digest))
        state = session_policy.evaluate(record, self.clock())
        if state is SessionState.ACTIVE:
            return SessionCheck(state, record)
        if record is not None:
            await self._storage("delete", self.repository.delete(digest))
            logger.info(
                f"Admin session {state.value}, record purged",
                extra={"subject_id": record.subject_id},
            )
        return SessionCheck(state)

    async def validate_session(self, token: str | None) -> SubjectId | None:
        """Subject id for a valid token, None for missing/malformed/expired."""
        check = await self.inspect_session(token)
        return check.subject_id

    async def destroy_session(self, cookies: CookieStore) -> None:
        """Revoke the caller's session (if any) and always clear the cookie."""
        token = self.read_token(cookies)
        if session_policy.is_well_formed(token):
            await self._storage(
                "delete", self.repository.delete(session_policy.digest_token(token)),
            )
        cookies.delete(self.cookie_name)
        logger.info("Admin session destroyed")

    async def purge_expired(self) -> int:
        """Delete every expired record; returns how many were removed."""
        purged = await self._storage(
            "purge", self.repository.delete_expired(self.clock()),
        )
        if purged:
            logger.info("Purged expired admin sessions", extra={"purged": purged})
        return purged

    async def _storage(self, operation: str, awaitable):
        try:
            return await awaitable
        except DatabaseError as e:
            logger.error(
                f"Session storage {operation} failed",
                extra={"error_code": e.code},
            )
            raise SessionStorageError(
                operation, context=ErrorContext(debug_info={"cause": e.code}),
            ) from e
