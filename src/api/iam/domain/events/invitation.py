"""Invitation domain events for IAM context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class InvitationCreated:
    """Event raised when an invitation is issued.

    Attributes:
        invitation_id: The ULID of the invitation
        tenant_id: Tenant the invitee will join
        email: Invitee e-mail address
        role: Role the invitee will receive
        expires_at: Instant after which the invitation can no longer be redeemed
        occurred_at: When the event occurred (UTC)
    """

    invitation_id: str
    tenant_id: str
    email: str
    role: str
    expires_at: datetime
    occurred_at: datetime


@dataclass(frozen=True)
class InvitationAccepted:
    """Event raised when an invitation is redeemed."""

    invitation_id: str
    tenant_id: str
    principal_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class InvitationExpired:
    """Event raised when a pending invitation passes its expiry."""

    invitation_id: str
    tenant_id: str
    occurred_at: datetime
