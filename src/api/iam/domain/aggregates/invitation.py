"""Invitation aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from iam.domain.events import InvitationAccepted, InvitationCreated, InvitationExpired
from iam.domain.validation import Invalid, normalize_email, validate_invitation
from iam.domain.value_objects import (
    InvitationId,
    InvitationStatus,
    PrincipalId,
    TenantId,
)
from iam.ports.exceptions import (
    InvitationAlreadyAcceptedError,
    InvitationExpiredError,
    ValidationFailedError,
)
from shared_kernel.authorization.types import Role

if TYPE_CHECKING:
    from iam.domain.events import DomainEvent


@dataclass
class Invitation:
    """Invitation aggregate granting a single e-mail address access to a tenant.

    Business rules:
    - Only operator and viewer roles can be granted by invitation
    - Status moves forward only: pending -> accepted | expired
    - Terminal invitations are immutable
    - An invitation is redeemable up to and including its expiry instant

    Event collection:
    - All mutating operations record domain events
    - Events can be collected via collect_events() for audit recording
    """

    id: InvitationId
    email: str
    role: Role
    tenant_id: TenantId
    token_hash: str
    expires_at: datetime
    status: InvitationStatus = InvitationStatus.PENDING
    invited_by_id: PrincipalId | None = None
    accepted_at: datetime | None = None
    created_at: datetime | None = None
    _pending_events: list[DomainEvent] = field(default_factory=list, repr=False)

    @classmethod
    def create(
        cls,
        email: str,
        role: Role,
        tenant_id: TenantId,
        token_hash: str,
        validity: timedelta,
        invited_by_id: PrincipalId | None = None,
        now: datetime | None = None,
    ) -> Invitation:
        """Factory method for creating a pending invitation.

        Raises:
            ValidationFailedError: If the e-mail or role is invalid
        """
        email = normalize_email(email)
        result = validate_invitation(email, role.value)
        if isinstance(result, Invalid):
            raise ValidationFailedError(result.errors)

        now = now or datetime.now(UTC)
        invitation = cls(
            id=InvitationId.generate(),
            email=email,
            role=role,
            tenant_id=tenant_id,
            token_hash=token_hash,
            expires_at=now + validity,
            invited_by_id=invited_by_id,
            created_at=now,
        )
        invitation._pending_events.append(
            InvitationCreated(
                invitation_id=invitation.id.value,
                tenant_id=tenant_id.value,
                email=email,
                role=role.value,
                expires_at=invitation.expires_at,
                occurred_at=now,
            )
        )
        return invitation

    def is_past_expiry(self, now: datetime) -> bool:
        return now > self.expires_at

    def ensure_redeemable(self) -> None:
        """Raise if the invitation is already in a terminal state."""
        if self.status == InvitationStatus.ACCEPTED:
            raise InvitationAlreadyAcceptedError(
                f"Invitation {self.id.value} was already accepted"
            )
        if self.status == InvitationStatus.EXPIRED:
            raise InvitationExpiredError(f"Invitation {self.id.value} has expired")

    def expire(self, now: datetime | None = None) -> None:
        """Move a pending invitation to expired."""
        if self.status != InvitationStatus.PENDING:
            return
        self.status = InvitationStatus.EXPIRED
        self._pending_events.append(
            InvitationExpired(
                invitation_id=self.id.value,
                tenant_id=self.tenant_id.value,
                occurred_at=now or datetime.now(UTC),
            )
        )

    def accept(self, principal_id: PrincipalId, now: datetime) -> None:
        """Mark the invitation as redeemed by a newly created principal.

        Raises:
            InvitationAlreadyAcceptedError: If already accepted
            InvitationExpiredError: If expired, or pending but past expiry
        """
        self.ensure_redeemable()
        if self.is_past_expiry(now):
            raise InvitationExpiredError(f"Invitation {self.id.value} has expired")

        self.status = InvitationStatus.ACCEPTED
        self.accepted_at = now
        self._pending_events.append(
            InvitationAccepted(
                invitation_id=self.id.value,
                tenant_id=self.tenant_id.value,
                principal_id=principal_id.value,
                occurred_at=now,
            )
        )

    def collect_events(self) -> list[DomainEvent]:
        """Return and clear pending domain events.

        Returns:
            List of pending domain events
        """
        events = self._pending_events.copy()
        self._pending_events.clear()
        return events
