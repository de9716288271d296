"""SQL Session Repository — SessionRepository backed by the admin_sessions table.

Invariants:
    - Every SQLAlchemyError is rolled back and re-raised as DatabaseError
    - Datetimes leave this module timezone-aware (UTC), even on SQLite
    - delete() of a missing digest is a no-op

Design Decisions:
    - Commits per operation: session writes must be durable before the cookie
      is handed to the client
"""

import logging
from datetime import datetime, timezone
from typing import NoReturn

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from admin_gateway.core.domain_types import SubjectId, TokenDigest
from admin_gateway.core.errors import DatabaseError
from admin_gateway.core.session_policy import AdminSessionRecord
from admin_gateway.models.admin_session import AdminSession

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on DateTime(timezone=True) columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(row: AdminSession) -> AdminSessionRecord:
    return AdminSessionRecord(
        token_digest=TokenDigest(row.token_digest),
        subject_id=SubjectId(row.subject_id),
        issued_at=_aware(row.issued_at),
        expires_at=_aware(row.expires_at),
    )


class SqlSessionRepository:
    """Persists AdminSessionRecords through an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, record: AdminSessionRecord) -> None:
        row = AdminSession(
            token_digest=record.token_digest,
            subject_id=record.subject_id,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
        )
        try:
            self.db.add(row)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail("insert", e)

    async def get(self, token_digest: TokenDigest) -> AdminSessionRecord | None:
        try:
            result = await self.db.execute(
                select(AdminSession).where(
                    AdminSession.token_digest == token_digest,
                ),
            )
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("select", e)
        return _to_record(row) if row else None

    async def delete(self, token_digest: TokenDigest) -> None:
        try:
            await self.db.execute(
                delete(AdminSession).where(
                    AdminSession.token_digest == token_digest,
                ),
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail("delete", e)

    async def delete_expired(self, now: datetime) -> int:
        try:
            result = await self.db.execute(
                delete(AdminSession).where(AdminSession.expires_at <= now),
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail("purge", e)
        return result.rowcount or 0

    async def _fail(self, operation: str, error: SQLAlchemyError) -> NoReturn:
        await self.db.rollback()
        logger.error(f"Session store {operation} failed: {error}")
        raise DatabaseError("Session store unavailable", operation) from error
