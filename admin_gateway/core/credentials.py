"""Credential Verifier — one-way bcrypt hashing and verification.

Invariants:
    - hash_password output is salted: same password twice → two different hashes
    - The stored hash embeds salt and cost, verification needs nothing else
    - verify_password returns False on mismatch, raises only on malformed hashes
    - Passwords beyond 72 UTF-8 bytes are rejected, never silently truncated

Design Decisions:
    - bcrypt.checkpw for comparison: constant-time, no hand-rolled compare
    - Sync functions: callers in async code run them via asyncio.to_thread
      (bcrypt is CPU-bound and would block the event loop)
"""

import bcrypt

from admin_gateway.core.errors import InvalidPasswordError, MalformedHashError

DEFAULT_COST = 12
BCRYPT_MAX_PASSWORD_BYTES = 72


def _encode_password(password: str) -> bytes:
    try:
        encoded = password.encode("utf-8")
    except (UnicodeEncodeError, AttributeError) as e:
        raise InvalidPasswordError("not encodable as UTF-8") from e
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        raise InvalidPasswordError(
            f"longer than {BCRYPT_MAX_PASSWORD_BYTES} bytes",
        )
    return encoded


def hash_password(password: str, cost: int = DEFAULT_COST) -> str:
    """Hash password with a fresh salt at the given bcrypt cost factor."""
    salt = bcrypt.gensalt(rounds=cost)
    return bcrypt.hashpw(_encode_password(password), salt).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """True iff password reproduces password_hash under its embedded salt/cost."""
    try:
        candidate = _encode_password(password)
    except InvalidPasswordError:
        # Nothing we refuse to hash can match a stored hash
        return False
    try:
        stored = password_hash.encode("ascii")
    except (UnicodeEncodeError, AttributeError) as e:
        raise MalformedHashError() from e
    try:
        return bcrypt.checkpw(candidate, stored)
    except ValueError as e:
        raise MalformedHashError() from e


def hash_cost(password_hash: str) -> int:
    """Cost factor embedded in a bcrypt hash ($2b$<cost>$...)."""
    parts = password_hash.split("$")
    if len(parts) != 4 or not parts[2].isdigit():
        raise MalformedHashError()
    return int(parts[2])
