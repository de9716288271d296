"""Admin Content Routes — guarded pass-through CRUD with cached reads.

Invariants:
    - Every route depends on require_admin (router-level dependency)
    - Reads are served through the cache; writes invalidate the resource's tag
      after the data service confirms them
    - Confirmed writes are attributed to the calling admin in the audit trail
    - Unknown resources rejected by path validation (ContentResource enum)
    - DELETE /cache without tag clears everything; with tag clears that tag only

Design Decisions:
    - Bodies are opaque JSON objects: editorial schemas belong to the data service
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status

from admin_gateway.api.dependencies import (
    AdminPrincipal,
    get_cache,
    get_content_service,
    require_admin,
)
from admin_gateway.core.cache_store import CacheStore
from admin_gateway.core.cache_tags import invalidate_tags
from admin_gateway.core.domain_types import CacheTag, ContentResource
from admin_gateway.services.content_service import ContentService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin-content"],
    dependencies=[Depends(require_admin)],
)


@router.get("/content/{resource}")
async def list_content(
    resource: ContentResource,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    content: ContentService = Depends(get_content_service),
):
    """List rows of a resource (cached per limit/offset)."""
    items = await content.list_items(resource, limit=limit, offset=offset)
    return {"items": items, "pagination": {"limit": limit, "offset": offset}}


@router.post("/content/{resource}", status_code=status.HTTP_201_CREATED)
async def create_content(
    resource: ContentResource,
    values: dict[str, Any] = Body(...),
    content: ContentService = Depends(get_content_service),
    admin: AdminPrincipal = Depends(require_admin),
):
    """Insert a row and invalidate the resource's cache tag."""
    item = await content.create_item(resource, values, actor=admin.subject_id)
    logger.info(
        f"Created {resource.value} row",
        extra={"subject_id": admin.subject_id, "table": resource.value},
    )
    return item


@router.patch("/content/{resource}/{item_id}")
async def update_content(
    resource: ContentResource,
    item_id: str,
    values: dict[str, Any] = Body(...),
    content: ContentService = Depends(get_content_service),
    admin: AdminPrincipal = Depends(require_admin),
):
    """Update one row by id and invalidate the resource's cache tag."""
    item = await content.update_item(
        resource, item_id, values, actor=admin.subject_id,
    )
    logger.info(
        f"Updated {resource.value} row",
        extra={"subject_id": admin.subject_id, "table": resource.value},
    )
    return item


@router.delete("/content/{resource}/{item_id}")
async def delete_content(
    resource: ContentResource,
    item_id: str,
    content: ContentService = Depends(get_content_service),
    admin: AdminPrincipal = Depends(require_admin),
):
    """Delete one row by id and invalidate the resource's cache tag."""
    await content.delete_item(resource, item_id, actor=admin.subject_id)
    logger.info(
        f"Deleted {resource.value} row",
        extra={"subject_id": admin.subject_id, "table": resource.value},
    )
    return {"ok": True}


@router.delete("/cache")
async def clear_cache(
    tag: CacheTag | None = Query(None),
    cache: CacheStore = Depends(get_cache),
):
    """Drop cached reads: everything, or only the keys a tag governs."""
    if tag is None:
        removed = len(cache)
        cache.clear()
    else:
        removed = invalidate_tags(cache, tag)
    return {"ok": True, "removed": removed}
