"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SubjectId is the administrator's identifier in the admin_users table
    - TokenDigest is the SHA-256 hex digest of an opaque session token;
      raw tokens are never persisted
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

SubjectId = NewType("SubjectId", str)
TokenDigest = NewType("TokenDigest", str)


# ─── Enums ───────────────────────────────────────────────────────

class SessionState(str, Enum):
    """Outcome of looking up an administrator session token."""
    ACTIVE = "active"
    EXPIRED = "expired"
    ABSENT = "absent"


class CacheTag(str, Enum):
    """Invalidation boundaries emitted by write handlers."""
    HOMEPAGE_SECTIONS = "homepage_sections"
    HOMEPAGE_CATEGORIES = "homepage_categories"
    HOMEPAGE_BANNERS = "homepage_banners"
    ADMIN_PRODUCTS = "admin_products"
    ADMIN_TEMPLATES = "admin_templates"


class ContentResource(str, Enum):
    """Editorial tables the admin API passes through to the data service."""
    CATEGORIES = "categories"
    BANNERS = "banners"
    HOMEPAGE_SECTIONS = "homepage_sections"
    PRODUCTS = "products"
    TEMPLATES = "templates"


class AuditAction(str, Enum):
    """What an administrator did to a content row."""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
