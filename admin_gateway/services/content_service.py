"""Content Service — cached read-through and tag-invalidating writes for admin resources.

Invariants:
    - Reads consult the cache first; only a miss calls the data service
    - Only successful reads are cached; failures leave the cache untouched
    - A write invalidates its resource's tag only after the data service
      confirmed it; a failed write invalidates nothing
    - Every data service call inherits the client's rate-limit retry policy
    - Callers receive their own list; mutating it never alters the cached copy
    - Confirmed writes by a known actor are recorded in the audit trail after
      the cache is invalidated

Design Decisions:
    - Cache and client injected per request: the app owns one instance of each,
      tests pass their own
    - Cache keys built with tagged_key(): list queries live under their tag's
      namespace so invalidate_tags() finds them
"""

import logging
from typing import Any

from admin_gateway.core.cache_store import CacheStore
from admin_gateway.core.cache_tags import invalidate_tags, tagged_key
from admin_gateway.core.content_catalog import catalog_entry
from admin_gateway.core.domain_types import AuditAction, ContentResource, SubjectId
from admin_gateway.core.errors import ResourceNotFoundError
from admin_gateway.infrastructure.data_service import ResilientDataServiceClient, Row, eq
from admin_gateway.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class ContentService:
    """Pass-through CRUD over editorial tables with caching on reads."""

    def __init__(
        self,
        client: ResilientDataServiceClient,
        cache: CacheStore,
        audit: AuditService | None = None,
    ):
        self.client = client
        self.cache = cache
        self.audit = audit

    async def list_items(
        self, resource: ContentResource, *, limit: int = 100, offset: int = 0,
    ) -> list[Row]:
        entry = catalog_entry(resource)
        key = tagged_key(entry.tag, entry.table, f"limit={limit}", f"offset={offset}")
        cached = self.cache.get(key, entry.ttl)
        if cached is not None:
            logger.debug("Cache hit", extra={"cache_key": key})
            return list(cached)
        rows = await self.client.select(
            entry.table, order=entry.order, limit=limit, offset=offset,
        )
        self.cache.set(key, list(rows))
        return rows

    async def create_item(
        self,
        resource: ContentResource,
        values: dict[str, Any],
        *,
        actor: SubjectId | None = None,
    ) -> Row:
        entry = catalog_entry(resource)
        rows = await self.client.insert(entry.table, values)
        invalidate_tags(self.cache, entry.tag)
        created = rows[0] if rows else {}
        await self._record(
            actor, entry.table, AuditAction.CREATED, created.get("id"), values,
        )
        return created

    async def update_item(
        self,
        resource: ContentResource,
        item_id: str,
        values: dict[str, Any],
        *,
        actor: SubjectId | None = None,
    ) -> Row:
        entry = catalog_entry(resource)
        rows = await self.client.update(entry.table, values, {"id": eq(item_id)})
        if not rows:
            raise ResourceNotFoundError(entry.table, item_id)
        invalidate_tags(self.cache, entry.tag)
        await self._record(actor, entry.table, AuditAction.UPDATED, item_id, values)
        return rows[0]

    async def delete_item(
        self,
        resource: ContentResource,
        item_id: str,
        *,
        actor: SubjectId | None = None,
    ) -> None:
        entry = catalog_entry(resource)
        rows = await self.client.delete(entry.table, {"id": eq(item_id)})
        if not rows:
            raise ResourceNotFoundError(entry.table, item_id)
        invalidate_tags(self.cache, entry.tag)
        await self._record(actor, entry.table, AuditAction.DELETED, item_id)

    async def _record(
        self,
        actor: SubjectId | None,
        table: str,
        action: AuditAction,
        object_id: object,
        values: dict[str, Any] | None = None,
    ) -> None:
        if self.audit is None or actor is None:
            return
        metadata = {"fields": sorted(values)} if values else None
        await self.audit.record(
            actor, table, action,
            str(object_id) if object_id is not None else None,
            metadata,
        )
