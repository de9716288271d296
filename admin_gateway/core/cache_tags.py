"""Cache Tags — tag → key-prefix mapping layered over the tag-agnostic CacheStore.

Invariants:
    - Every cached read uses a key built by tagged_key(), so its prefix names a tag
    - Invalidating a tag deletes every key under each prefix the tag governs
    - ADMIN_PRODUCTS also governs homepage sections (sections embed products)
    - TTLs are seconds and are passed at read time

Design Decisions:
    - Explicit TAG_PREFIXES table over ad hoc string matching: the set of keys a
      write invalidates is checkable in one place
    - Pure functions over CacheStore: no IO, usable from any handler
"""

import logging
from collections.abc import Iterable

from admin_gateway.core.cache_store import CacheStore
from admin_gateway.core.domain_types import CacheTag

logger = logging.getLogger(__name__)

KEY_SEPARATOR = ":"


# Read-time TTLs, seconds
TTL_CATEGORIES = 300
TTL_PRODUCTS = 300
TTL_BANNERS = 300
TTL_HOMEPAGE_SECTIONS = 600
TTL_TEMPLATES = 300


def _prefix(tag: CacheTag) -> str:
    return f"{tag.value}{KEY_SEPARATOR}"


TAG_PREFIXES: dict[CacheTag, tuple[str, ...]] = {
    CacheTag.HOMEPAGE_SECTIONS: (_prefix(CacheTag.HOMEPAGE_SECTIONS),),
    CacheTag.HOMEPAGE_CATEGORIES: (_prefix(CacheTag.HOMEPAGE_CATEGORIES),),
    CacheTag.HOMEPAGE_BANNERS: (_prefix(CacheTag.HOMEPAGE_BANNERS),),
    CacheTag.ADMIN_PRODUCTS: (
        _prefix(CacheTag.ADMIN_PRODUCTS),
        _prefix(CacheTag.HOMEPAGE_SECTIONS),
    ),
    CacheTag.ADMIN_TEMPLATES: (_prefix(CacheTag.ADMIN_TEMPLATES),),
}


def tagged_key(tag: CacheTag, *parts: object) -> str:
    """Build a cache key namespaced by tag: "<tag>:<part>:<part>"."""
    if not parts:
        parts = ("all",)
    return KEY_SEPARATOR.join([tag.value, *(str(p) for p in parts)])


def keys_for_tag(keys: Iterable[str], tag: CacheTag) -> list[str]:
    """Subset of keys governed by tag."""
    prefixes = TAG_PREFIXES[tag]
    return [k for k in keys if k.startswith(prefixes)]


def invalidate_tags(cache: CacheStore, *tags: CacheTag) -> int:
    """Delete every entry governed by any of tags. Returns number removed."""
    doomed: set[str] = set()
    snapshot = cache.keys()
    for tag in tags:
        doomed.update(keys_for_tag(snapshot, tag))
    for key in doomed:
        cache.delete(key)
    if doomed:
        logger.info(
            f"Invalidated {len(doomed)} cache entries",
            extra={"tag": ",".join(t.value for t in tags)},
        )
    return len(doomed)
