"""Audit Service — trail of administrator writes kept in the audit_log table.

Invariants:
    - One audit_log row per confirmed write: {user_id, object_type, object_id,
      action, metadata}; nothing is recorded for a write the data service rejected
    - Metadata names the changed fields, never their values
    - A failed audit insert is logged at error level and reported as False; the
      content write it describes has already been committed and stays committed
    - History reads are never cached: the trail is read for what just happened

Design Decisions:
    - audit_log lives in the data service next to the content it describes, so
      inserts go through the same rate-limit-aware client
"""

import logging
from dataclasses import dataclass
from typing import Any

from admin_gateway.core.domain_types import AuditAction, SubjectId
from admin_gateway.core.errors import DataServiceError
from admin_gateway.infrastructure.data_service import ResilientDataServiceClient, Row, eq

logger = logging.getLogger(__name__)

AUDIT_TABLE = "audit_log"


@dataclass(frozen=True)
class AuditQuery:
    """Filters for the audit history; None means "any"."""
    limit: int = 20
    offset: int = 0
    object_type: str | None = None
    object_id: str | None = None
    action: AuditAction | None = None
    user_id: str | None = None

    def filters(self) -> dict[str, str]:
        wanted = {
            "object_type": self.object_type,
            "object_id": self.object_id,
            "action": self.action.value if self.action else None,
            "user_id": self.user_id,
        }
        return {column: eq(value) for column, value in wanted.items() if value}


class AuditService:
    """Writes and reads the administrator audit trail."""

    def __init__(self, client: ResilientDataServiceClient):
        self.client = client

    async def record(
        self,
        actor: SubjectId,
        object_type: str,
        action: AuditAction,
        object_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        entry: Row = {
            "user_id": actor,
            "object_type": object_type,
            "object_id": object_id,
            "action": action.value,
            "metadata": metadata or {},
        }
        try:
            await self.client.insert(AUDIT_TABLE, entry)
        except DataServiceError as e:
            logger.error(
                f"Audit entry for {action.value} {object_type} not recorded",
                extra={
                    "subject_id": actor,
                    "table": object_type,
                    "error_code": e.code,
                    "service_code": e.service_code,
                },
            )
            return False
        return True

    async def history(self, query: AuditQuery) -> list[Row]:
        return await self.client.select(
            AUDIT_TABLE,
            filters=query.filters(),
            order="created_at.desc",
            limit=query.limit,
            offset=query.offset,
        )
