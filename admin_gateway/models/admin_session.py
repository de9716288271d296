"""AdminSession ORM — persisted administrator sessions, keyed by token digest.

Invariants:
    - token_digest is the SHA-256 hex of the cookie token (raw token never stored)
    - Rows are immutable: re-authentication inserts a new row, logout deletes it
    - expires_at indexed for housekeeping purges

Design Decisions:
    - Stored in SQL rather than in the cookie itself: revocation works server-side
      and sessions survive process restarts
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from admin_gateway.db.base import Base


class AdminSession(Base):
    """One row per issued administrator session."""
    __tablename__ = "admin_sessions"

    token_digest: Mapped[str] = mapped_column(String(64), primary_key=True)
    subject_id: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True,
    )
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True,
    )
