"""Admin Audit Routes — read the trail of administrator writes.

Invariants:
    - Guarded by require_admin like every other admin route
    - Newest entries first; limit 1-200 (default 20), offset >= 0
    - Unknown action values rejected by query validation (AuditAction enum)
"""

from fastapi import APIRouter, Depends, Query

from admin_gateway.api.dependencies import get_audit_service, require_admin
from admin_gateway.core.domain_types import AuditAction
from admin_gateway.services.audit_service import AuditQuery, AuditService

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin-audit"],
    dependencies=[Depends(require_admin)],
)


@router.get("/audit-history")
async def audit_history(
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    object_type: str | None = Query(None, max_length=64),
    object_id: str | None = Query(None, max_length=255),
    action: AuditAction | None = Query(None),
    user_id: str | None = Query(None, max_length=255),
    audit: AuditService = Depends(get_audit_service),
):
    query = AuditQuery(
        limit=limit,
        offset=offset,
        object_type=object_type,
        object_id=object_id,
        action=action,
        user_id=user_id,
    )
    items = await audit.history(query)
    return {"items": items, "pagination": {"limit": limit, "offset": offset}}
