"""Content Service — cached reads and tag invalidation on writes.

Invariants:
    - Second identical read within the TTL is served from cache
    - A successful write drops the resource's cached reads
    - A failed write leaves cached reads in place
"""

import pytest

from admin_gateway.core.cache_store import CacheStore
from admin_gateway.core.cache_tags import tagged_key
from admin_gateway.core.domain_types import CacheTag, ContentResource
from admin_gateway.core.errors import DataServiceError, ResourceNotFoundError
from admin_gateway.services.content_service import ContentService


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def content(data_service, clock):
    return ContentService(data_service.client(), CacheStore(clock=clock))


async def test_second_read_served_from_cache(content, data_service):
    first = await content.list_items(ContentResource.TEMPLATES)
    second = await content.list_items(ContentResource.TEMPLATES)
    assert first == second
    assert data_service.calls_to("templates", "GET") == 1


async def test_read_uses_catalog_order_and_paging(content, data_service):
    await content.list_items(ContentResource.TEMPLATES, limit=10, offset=5)
    params = data_service.requests[0].url.params
    assert params["order"] == "created_at.desc"
    assert params["limit"] == "10"
    assert params["offset"] == "5"


async def test_read_keyed_under_resource_tag(content):
    await content.list_items(ContentResource.TEMPLATES, limit=10, offset=0)
    key = tagged_key(CacheTag.ADMIN_TEMPLATES, "templates", "limit=10", "offset=0")
    assert key in content.cache


async def test_stale_read_refetched_after_ttl(content, data_service, clock):
    await content.list_items(ContentResource.TEMPLATES)
    clock.now += 301
    await content.list_items(ContentResource.TEMPLATES)
    assert data_service.calls_to("templates", "GET") == 2


async def test_create_invalidates_tag(content, data_service):
    await content.list_items(ContentResource.TEMPLATES)
    created = await content.create_item(ContentResource.TEMPLATES, {"name": "Desk"})
    assert created["name"] == "Desk"
    rows = await content.list_items(ContentResource.TEMPLATES)
    assert any(r["name"] == "Desk" for r in rows)
    assert data_service.calls_to("templates", "GET") == 2


async def test_write_leaves_other_tags_cached(content, data_service):
    await content.list_items(ContentResource.TEMPLATES)
    await content.list_items(ContentResource.PRODUCTS)
    await content.update_item(ContentResource.TEMPLATES, "t1", {"name": "Couch"})
    await content.list_items(ContentResource.PRODUCTS)
    assert data_service.calls_to("products", "GET") == 1


async def test_product_write_drops_homepage_sections(content, data_service):
    await content.list_items(ContentResource.HOMEPAGE_SECTIONS)
    await content.update_item(ContentResource.PRODUCTS, "p1", {"name": "Floor lamp"})
    await content.list_items(ContentResource.HOMEPAGE_SECTIONS)
    assert data_service.calls_to("homepage_sections", "GET") == 2


async def test_failed_write_keeps_cache(content, data_service):
    await content.list_items(ContentResource.TEMPLATES)
    data_service.fail_next(500, {"code": "XX000", "message": "boom"})
    with pytest.raises(DataServiceError):
        await content.create_item(ContentResource.TEMPLATES, {"name": "Desk"})
    await content.list_items(ContentResource.TEMPLATES)
    assert data_service.calls_to("templates", "GET") == 1


async def test_failed_read_not_cached(content, data_service):
    data_service.fail_next(500)
    with pytest.raises(DataServiceError):
        await content.list_items(ContentResource.TEMPLATES)
    assert len(content.cache) == 0


async def test_update_missing_row_raises_not_found(content):
    await content.list_items(ContentResource.TEMPLATES)
    with pytest.raises(ResourceNotFoundError):
        await content.update_item(ContentResource.TEMPLATES, "missing", {"name": "x"})
    assert len(content.cache) == 1


async def test_delete_invalidates_tag(content, data_service):
    await content.list_items(ContentResource.TEMPLATES)
    await content.delete_item(ContentResource.TEMPLATES, "t2")
    rows = await content.list_items(ContentResource.TEMPLATES)
    assert [r["id"] for r in rows] == ["t1"]


async def test_caller_mutation_does_not_touch_cache(content):
    first = await content.list_items(ContentResource.TEMPLATES)
    first.clear()
    second = await content.list_items(ContentResource.TEMPLATES)
    second.append({"id": "bogus"})
    third = await content.list_items(ContentResource.TEMPLATES)
    assert [r["id"] for r in third] == ["t1", "t2"]
