"""Cache Tags — tag-namespaced keys and tag invalidation over CacheStore.

Tests cover:
    - tagged_key namespacing
    - Every tag has a prefix mapping
    - Invalidating a tag removes only its keys
    - Product writes also invalidate homepage sections
"""

from admin_gateway.core.cache_store import CacheStore
from admin_gateway.core.cache_tags import (
    TAG_PREFIXES, invalidate_tags, keys_for_tag, tagged_key,
)
from admin_gateway.core.content_catalog import CATALOG
from admin_gateway.core.domain_types import CacheTag, ContentResource


def _filled_cache() -> CacheStore:
    cache = CacheStore()
    for tag in CacheTag:
        cache.set(tagged_key(tag, "list"), tag.value)
    cache.set("untagged", "x")
    return cache


def test_tagged_key_is_namespaced_by_tag():
    assert tagged_key(CacheTag.ADMIN_TEMPLATES) == "admin_templates:all"
    assert tagged_key(CacheTag.HOMEPAGE_BANNERS, "banners", 10) == "homepage_banners:banners:10"


def test_every_tag_governs_its_own_namespace():
    for tag in CacheTag:
        assert tagged_key(tag, "x").startswith(TAG_PREFIXES[tag])


def test_invalidate_tag_removes_only_its_keys():
    cache = _filled_cache()
    removed = invalidate_tags(cache, CacheTag.HOMEPAGE_BANNERS)
    assert removed == 1
    assert cache.get(tagged_key(CacheTag.HOMEPAGE_BANNERS, "list"), 60) is None
    assert cache.get(tagged_key(CacheTag.HOMEPAGE_CATEGORIES, "list"), 60) == "homepage_categories"
    assert cache.get("untagged", 60) == "x"


def test_product_tag_also_invalidates_homepage_sections():
    cache = _filled_cache()
    removed = invalidate_tags(cache, CacheTag.ADMIN_PRODUCTS)
    assert removed == 2
    assert cache.get(tagged_key(CacheTag.HOMEPAGE_SECTIONS, "list"), 60) is None
    assert cache.get(tagged_key(CacheTag.ADMIN_PRODUCTS, "list"), 60) is None


def test_invalidate_several_tags_counts_each_key_once():
    cache = _filled_cache()
    removed = invalidate_tags(
        cache, CacheTag.ADMIN_PRODUCTS, CacheTag.HOMEPAGE_SECTIONS,
    )
    assert removed == 2


def test_invalidate_unused_tag_is_noop():
    cache = CacheStore()
    cache.set("untagged", 1)
    assert invalidate_tags(cache, CacheTag.ADMIN_TEMPLATES) == 0
    assert len(cache) == 1


def test_similar_names_do_not_collide():
    keys = ["homepage_sections:all", "homepage_sections_archive:all"]
    assert keys_for_tag(keys, CacheTag.HOMEPAGE_SECTIONS) == ["homepage_sections:all"]


def test_catalog_covers_every_resource():
    assert set(CATALOG) == set(ContentResource)
    assert CATALOG[ContentResource.PRODUCTS].tag is CacheTag.ADMIN_PRODUCTS
