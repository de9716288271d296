"""Boundary Protocols — contracts between core/services and the IO shell.

Invariants:
    - Session persistence and cookie access reached only through these Protocols
    - SessionRepository implementations raise DatabaseError on storage failure
    - CookieStore is a per-request capability handed to each Session Manager
      call, never ambient request state

Design Decisions:
    - Protocol over ABC: structural subtyping, in-memory fakes need no base class
    - Async repository, sync cookie store: cookies are staged on the outgoing
      response, not written to IO until the response is sent
"""

from datetime import datetime
from typing import Protocol

from admin_gateway.core.domain_types import TokenDigest
from admin_gateway.core.session_policy import AdminSessionRecord


class SessionRepository(Protocol):
    """Contract for administrator session persistence — implemented by shell."""
    async def save(self, record: AdminSessionRecord) -> None: ...
    async def get(self, token_digest: TokenDigest) -> AdminSessionRecord | None: ...
    async def delete(self, token_digest: TokenDigest) -> None: ...
    async def delete_expired(self, now: datetime) -> int: ...


class CookieStore(Protocol):
    """Contract for reading and staging the caller's cookies."""
    def get(self, name: str) -> str | None: ...
    def set(self, name: str, value: str, *, max_age: int) -> None: ...
    def delete(self, name: str) -> None: ...
