"""Session Policy — pure rules for administrator session tokens and lifetimes.

Invariants:
    - Tokens are opaque: 32 random bytes, URL-safe base64, no parseable structure
    - Only the SHA-256 digest of a token is ever persisted
    - A record is ACTIVE iff issued_at <= now < expires_at; anything else is
      EXPIRED (past expiry) or ABSENT (inconsistent, or issued after now)
    - Expiry is fixed at issuance and never extended by validation

Design Decisions:
    - Fixed-lifetime sessions (no sliding renewal): re-authentication is the
      only way to extend administrative access
    - Frozen dataclass record: sessions are immutable once issued
"""

import hashlib
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from admin_gateway.core.domain_types import SessionState, SubjectId, TokenDigest

TOKEN_BYTES = 32
DEFAULT_LIFETIME = timedelta(hours=24)

# token_urlsafe(32) yields 43 chars of [A-Za-z0-9_-]
_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{43}$")


@dataclass(frozen=True)
class AdminSessionRecord:
    """Persisted administrator session (digest only, never the raw token)."""
    token_digest: TokenDigest
    subject_id: SubjectId
    issued_at: datetime
    expires_at: datetime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def is_well_formed(token: str | None) -> bool:
    return bool(token) and _TOKEN_PATTERN.match(token) is not None


def digest_token(token: str) -> TokenDigest:
    return TokenDigest(hashlib.sha256(token.encode("ascii")).hexdigest())


def issue_record(
    token: str, subject_id: str, now: datetime, lifetime: timedelta,
) -> AdminSessionRecord:
    """Build the record for a freshly generated token."""
    if lifetime <= timedelta(0):
        raise ValueError("session lifetime must be positive")
    return AdminSessionRecord(
        token_digest=digest_token(token),
        subject_id=SubjectId(subject_id),
        issued_at=now,
        expires_at=now + lifetime,
    )


def evaluate(record: AdminSessionRecord | None, now: datetime) -> SessionState:
    """Classify a looked-up record at time now."""
    if record is None or not record.subject_id:
        return SessionState.ABSENT
    if record.expires_at <= record.issued_at:
        return SessionState.ABSENT
    # Issued in the future: clock skew or a forged row
    if now < record.issued_at:
        return SessionState.ABSENT
    if now >= record.expires_at:
        return SessionState.EXPIRED
    return SessionState.ACTIVE
