"""Pydantic models for audit API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from audit.domain import ActivitySummary, AuditEntry


class AuditEntryResponse(BaseModel):
    """Response model for one audit entry."""

    id: str
    action: str
    occurred_at: datetime
    actor_id: str | None
    actor_email: str | None
    actor_role: str | None
    tenant_id: str | None
    resource_type: str | None
    resource_id: str | None
    changes: dict[str, Any]
    ip_address: str | None
    user_agent: str | None

    @classmethod
    def from_domain(cls, entry: AuditEntry) -> AuditEntryResponse:
        return cls(
            id=entry.id,
            action=entry.action,
            occurred_at=entry.occurred_at,
            actor_id=entry.actor_id,
            actor_email=entry.actor_email,
            actor_role=entry.actor_role,
            tenant_id=entry.tenant_id,
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            changes=dict(entry.changes),
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
        )


class ActivitySummaryResponse(BaseModel):
    """Response model for the activity summary."""

    tenant_id: str | None
    logins_last_7_days: int
    logins_last_30_days: int
    recent: list[AuditEntryResponse]

    @classmethod
    def from_domain(cls, summary: ActivitySummary) -> ActivitySummaryResponse:
        return cls(
            tenant_id=summary.tenant_id,
            logins_last_7_days=summary.logins_last_7_days,
            logins_last_30_days=summary.logins_last_30_days,
            recent=[AuditEntryResponse.from_domain(e) for e in summary.recent],
        )
