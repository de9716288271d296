"""Content Catalog — which data service table, cache tag and TTL back each admin resource.

Invariants:
    - Every ContentResource has exactly one entry
    - A write to a resource invalidates its tag; reads are keyed under that tag

Design Decisions:
    - Rows are opaque JSON objects: editorial schemas are owned by the data service
"""

from dataclasses import dataclass

from admin_gateway.core import cache_tags
from admin_gateway.core.domain_types import CacheTag, ContentResource


@dataclass(frozen=True)
class CatalogEntry:
    table: str
    tag: CacheTag
    ttl: float
    order: str


CATALOG: dict[ContentResource, CatalogEntry] = {
    ContentResource.CATEGORIES: CatalogEntry(
        "categories", CacheTag.HOMEPAGE_CATEGORIES,
        cache_tags.TTL_CATEGORIES, "sort_order.asc",
    ),
    ContentResource.BANNERS: CatalogEntry(
        "banners", CacheTag.HOMEPAGE_BANNERS,
        cache_tags.TTL_BANNERS, "sort_order.asc",
    ),
    ContentResource.HOMEPAGE_SECTIONS: CatalogEntry(
        "homepage_sections", CacheTag.HOMEPAGE_SECTIONS,
        cache_tags.TTL_HOMEPAGE_SECTIONS, "position.asc",
    ),
    ContentResource.PRODUCTS: CatalogEntry(
        "products", CacheTag.ADMIN_PRODUCTS,
        cache_tags.TTL_PRODUCTS, "created_at.desc",
    ),
    ContentResource.TEMPLATES: CatalogEntry(
        "templates", CacheTag.ADMIN_TEMPLATES,
        cache_tags.TTL_TEMPLATES, "created_at.desc",
    ),
}


def catalog_entry(resource: ContentResource) -> CatalogEntry:
    return CATALOG[resource]
