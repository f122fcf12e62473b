"""Principal domain events for IAM context.

Domain events related to principal lifecycle, role and credential changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PrincipalCreated:
    """Event raised when a principal is created.

    Attributes:
        principal_id: The ULID of the new principal
        email: Normalized e-mail address
        role: Role assigned at creation
        tenant_id: Owning tenant (None for root admins)
        occurred_at: When the event occurred (UTC)
    """

    principal_id: str
    email: str
    role: str
    tenant_id: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class PrincipalRoleChanged:
    """Event raised when a principal's role changes."""

    principal_id: str
    tenant_id: str | None
    old_role: str
    new_role: str
    occurred_at: datetime


@dataclass(frozen=True)
class PrincipalDeactivated:
    """Event raised when a principal is prevented from signing in."""

    principal_id: str
    tenant_id: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class PrincipalActivated:
    """Event raised when a deactivated principal is allowed back in."""

    principal_id: str
    tenant_id: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class PrincipalDeleted:
    """Event raised when a principal is removed.

    Carries a snapshot of the e-mail so the audit trail stays readable
    after the row is gone.
    """

    principal_id: str
    email: str
    tenant_id: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class PasswordChanged:
    """Event raised when a principal sets a new password themselves."""

    principal_id: str
    tenant_id: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class PasswordReset:
    """Event raised when an administrator resets a principal's password."""

    principal_id: str
    tenant_id: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class PrincipalEmailChanged:
    """Event raised when a principal confirms a new e-mail address."""

    principal_id: str
    tenant_id: str | None
    old_email: str
    new_email: str
    occurred_at: datetime
