"""HTTP routes for reading the audit log.

There are no routes that change or remove entries.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from audit.application.audit_service import AuditService
from audit.dependencies import get_audit_service
from audit.domain import AuditFilters
from audit.domain.entry import MAX_PAGE_SIZE
from audit.presentation.models import ActivitySummaryResponse, AuditEntryResponse
from iam.dependencies.authentication import get_current_scope, get_request_context
from shared_kernel.audit.ports import RequestContext
from shared_kernel.authorization.exceptions import UnauthorizedError
from shared_kernel.authorization.types import Scope

router = APIRouter(
    prefix="/audit",
    tags=["audit"],
)


@router.get("/logs")
async def list_audit_entries(
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[AuditService, Depends(get_audit_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
    tenant_id: str | None = None,
    action: str | None = None,
    resource_type: str | None = None,
    actor_id: str | None = None,
    occurred_after: datetime | None = None,
    occurred_before: datetime | None = None,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[AuditEntryResponse]:
    """List audit entries, newest first.

    Tenant admins only see their own tenant; ``tenant_id`` is honoured for
    root admins.

    Raises:
        HTTPException: 403 if the caller may not view audit logs
    """
    filters = AuditFilters(
        action=action,
        resource_type=resource_type,
        actor_id=actor_id,
        occurred_after=occurred_after,
        occurred_before=occurred_before,
        limit=limit,
        offset=offset,
    )
    try:
        entries = await service.query(scope, tenant_id, filters, context)
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(e)
        ) from e
    return [AuditEntryResponse.from_domain(entry) for entry in entries]


@router.get("/activity")
async def get_activity_summary(
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[AuditService, Depends(get_audit_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
    tenant_id: str | None = None,
) -> ActivitySummaryResponse:
    """Sign-in counts for the last 7 and 30 days and the latest entries."""
    try:
        summary = await service.activity_summary(scope, tenant_id, context)
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(e)
        ) from e
    return ActivitySummaryResponse.from_domain(summary)
