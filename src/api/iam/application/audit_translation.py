"""Translation of IAM domain events into audit entries.

Each domain event collected from an aggregate maps to exactly one audit
entry. Services record them after their transaction commits.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from iam.domain.events import (
    DomainEvent,
    InvitationAccepted,
    InvitationCreated,
    InvitationExpired,
    PasswordChanged,
    PasswordReset,
    PrincipalActivated,
    PrincipalCreated,
    PrincipalDeactivated,
    PrincipalDeleted,
    PrincipalEmailChanged,
    PrincipalRoleChanged,
    TenantActivated,
    TenantCreated,
    TenantDeactivated,
    TenantSettingsUpdated,
)
from shared_kernel.audit.ports import IAuditLogger, RequestContext
from shared_kernel.authorization.types import Scope


@dataclass(frozen=True)
class AuditRecord:
    """Audit entry attributes derived from a domain event."""

    action: str
    tenant_id: str | None
    resource_type: str
    resource_id: str
    changes: dict[str, Any]


def to_audit_record(event: DomainEvent) -> AuditRecord:
    """Map a domain event to the audit entry describing it.

    Raises:
        ValueError: If the event type is unknown
    """
    match event:
        case TenantCreated():
            return AuditRecord(
                "tenant.created",
                event.tenant_id,
                "tenant",
                event.tenant_id,
                {"name": event.name, "slug": event.slug},
            )
        case TenantSettingsUpdated():
            return AuditRecord(
                "tenant.settings_updated",
                event.tenant_id,
                "tenant",
                event.tenant_id,
                {"before": event.before, "after": event.after},
            )
        case TenantDeactivated():
            return AuditRecord(
                "tenant.deactivated",
                event.tenant_id,
                "tenant",
                event.tenant_id,
                {"before": {"active": True}, "after": {"active": False}},
            )
        case TenantActivated():
            return AuditRecord(
                "tenant.activated",
                event.tenant_id,
                "tenant",
                event.tenant_id,
                {"before": {"active": False}, "after": {"active": True}},
            )
        case PrincipalCreated():
            return AuditRecord(
                "principal.created",
                event.tenant_id,
                "principal",
                event.principal_id,
                {"email": event.email, "role": event.role},
            )
        case PrincipalRoleChanged():
            return AuditRecord(
                "principal.role_changed",
                event.tenant_id,
                "principal",
                event.principal_id,
                {"before": {"role": event.old_role}, "after": {"role": event.new_role}},
            )
        case PrincipalDeactivated():
            return AuditRecord(
                "principal.deactivated",
                event.tenant_id,
                "principal",
                event.principal_id,
                {"before": {"status": "active"}, "after": {"status": "inactive"}},
            )
        case PrincipalActivated():
            return AuditRecord(
                "principal.activated",
                event.tenant_id,
                "principal",
                event.principal_id,
                {"before": {"status": "inactive"}, "after": {"status": "active"}},
            )
        case PrincipalDeleted():
            return AuditRecord(
                "principal.deleted",
                event.tenant_id,
                "principal",
                event.principal_id,
                {"email": event.email},
            )
        case PrincipalEmailChanged():
            return AuditRecord(
                "principal.email_changed",
                event.tenant_id,
                "principal",
                event.principal_id,
                {
                    "before": {"email": event.old_email},
                    "after": {"email": event.new_email},
                },
            )
        case PasswordChanged():
            return AuditRecord(
                "principal.password_changed",
                event.tenant_id,
                "principal",
                event.principal_id,
                {},
            )
        case PasswordReset():
            return AuditRecord(
                "principal.password_reset",
                event.tenant_id,
                "principal",
                event.principal_id,
                {"must_change_password": True},
            )
        case InvitationCreated():
            return AuditRecord(
                "invitation.created",
                event.tenant_id,
                "invitation",
                event.invitation_id,
                {
                    "email": event.email,
                    "role": event.role,
                    "expires_at": event.expires_at.isoformat(),
                },
            )
        case InvitationAccepted():
            return AuditRecord(
                "invitation.accepted",
                event.tenant_id,
                "invitation",
                event.invitation_id,
                {"principal_id": event.principal_id},
            )
        case InvitationExpired():
            return AuditRecord(
                "invitation.expired",
                event.tenant_id,
                "invitation",
                event.invitation_id,
                {},
            )
    raise ValueError(f"No audit mapping for event {type(event).__name__}")


async def record_events(
    audit: IAuditLogger,
    actor: Scope | None,
    events: list[DomainEvent],
    request: RequestContext | None = None,
) -> None:
    """Record one audit entry per collected domain event."""
    for event in events:
        record = to_audit_record(event)
        await audit.record(
            actor,
            record.action,
            tenant_id=record.tenant_id,
            resource_type=record.resource_type,
            resource_id=record.resource_id,
            changes=record.changes,
            request=request,
        )
