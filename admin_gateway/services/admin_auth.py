"""Admin Authentication — checks administrator credentials against the admin_users table.

Invariants:
    - Bad credentials are a None result, never an exception
    - Unknown usernames still cost one bcrypt comparison (no user enumeration
      through response timing)
    - bcrypt runs in a worker thread; the event loop is never blocked by hashing
    - Data service failures (including exhausted rate-limit retries) propagate
      unchanged: "temporarily unavailable" is not "access denied"
    - Password hashes never leave this module

Design Decisions:
    - Identity lives in the data service's admin_users table; this service owns
      only the comparison, never persistence of credentials
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from functools import lru_cache

from admin_gateway.core.credentials import (
    DEFAULT_COST, hash_cost, hash_password, verify_password,
)
from admin_gateway.core.errors import DataServiceError, MalformedHashError
from admin_gateway.infrastructure.data_service import ResilientDataServiceClient, eq

logger = logging.getLogger(__name__)

ADMIN_USERS_TABLE = "admin_users"
UNIQUE_VIOLATION = "23505"


@dataclass(frozen=True)
class AdminUser:
    """Authenticated administrator (no credential material)."""
    id: str
    username: str
    role: str
    email: str | None = None


class AdminAuthService:
    """Verifies administrator credentials held by the backing data service."""

    def __init__(
        self, client: ResilientDataServiceClient, *, policy_cost: int = DEFAULT_COST,
    ):
        self.client = client
        self.policy_cost = policy_cost

    async def authenticate(self, username: str, password: str) -> AdminUser | None:
        rows = await self.client.select(
            ADMIN_USERS_TABLE,
            columns="id,username,email,password_hash,role",
            filters={"username": eq(username)},
            limit=1,
        )
        if not rows or not rows[0].get("password_hash"):
            await asyncio.to_thread(_burn_comparison, password, self.policy_cost)
            logger.info("Admin login rejected: unknown user")
            return None

        row = rows[0]
        try:
            matched = await asyncio.to_thread(
                verify_password, password, row["password_hash"],
            )
        except MalformedHashError:
            logger.error(
                "Admin user has malformed password hash",
                extra={"subject_id": str(row["id"])},
            )
            raise
        if not matched:
            logger.info(
                "Admin login rejected: password mismatch",
                extra={"subject_id": str(row["id"])},
            )
            return None

        if hash_cost(row["password_hash"]) < self.policy_cost:
            logger.warning(
                "Admin password hash cost below policy, rehash on next reset",
                extra={"subject_id": str(row["id"])},
            )
        return AdminUser(
            id=str(row["id"]),
            username=row["username"],
            role=row.get("role") or "admin",
            email=row.get("email"),
        )


@lru_cache
def _dummy_hash(cost: int) -> str:
    return hash_password(secrets.token_urlsafe(16), cost)


def _burn_comparison(password: str, cost: int) -> None:
    verify_password(password, _dummy_hash(cost))


async def seed_admin_user(
    client: ResilientDataServiceClient,
    username: str,
    email: str | None,
    password: str,
    *,
    role: str = "admin",
    cost: int = DEFAULT_COST,
) -> bool:
    """Insert an administrator with a hashed password.

    Returns False when the username already exists (unique violation).
    """
    password_hash = await asyncio.to_thread(hash_password, password, cost)
    try:
        await client.insert(ADMIN_USERS_TABLE, {
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "role": role,
        })
    except DataServiceError as e:
        if e.service_code == UNIQUE_VIOLATION:
            logger.info("Admin user already exists")
            return False
        raise
    logger.info("Admin user seeded")
    return True
