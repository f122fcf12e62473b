"""Tenant aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from iam.domain.events import (
    TenantActivated,
    TenantCreated,
    TenantDeactivated,
    TenantSettingsUpdated,
)
from iam.domain.validation import (
    DEFAULT_TENANT_SETTINGS,
    Invalid,
    validate_tenant,
    validate_tenant_settings,
)
from iam.domain.value_objects import TenantId
from iam.ports.exceptions import ValidationFailedError

if TYPE_CHECKING:
    from iam.domain.events import DomainEvent


@dataclass
class Tenant:
    """Tenant aggregate representing an organization in the system.

    Tenants are the top-level isolation boundary in the system. Every
    principal except root admins, every invitation and most audit entries
    belong to exactly one tenant.

    Business rules:
    - Tenant slugs are globally unique and contain only [a-z0-9-]
    - Settings only accept known keys; unknown keys are rejected
    - Deactivation only flips the flag; nothing is removed

    Event collection:
    - All mutating operations record domain events
    - Events can be collected via collect_events() for audit recording
    """

    id: TenantId
    name: str
    slug: str
    active: bool = True
    contact_email: str | None = None
    contact_phone: str | None = None
    settings: dict[str, Any] = field(
        default_factory=lambda: dict(DEFAULT_TENANT_SETTINGS)
    )
    created_at: datetime | None = None
    _pending_events: list[DomainEvent] = field(default_factory=list, repr=False)

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        contact_email: str | None = None,
        contact_phone: str | None = None,
        now: datetime | None = None,
    ) -> Tenant:
        """Factory method for creating a new tenant.

        Raises:
            ValidationFailedError: If any attribute is invalid
        """
        result = validate_tenant(name, slug, contact_email, contact_phone)
        if isinstance(result, Invalid):
            raise ValidationFailedError(result.errors)

        now = now or datetime.now(UTC)
        tenant = cls(
            id=TenantId.generate(),
            name=name,
            slug=slug,
            contact_email=contact_email,
            contact_phone=contact_phone,
            created_at=now,
        )
        tenant._pending_events.append(
            TenantCreated(
                tenant_id=tenant.id.value,
                name=name,
                slug=slug,
                occurred_at=now,
            )
        )
        return tenant

    def update_settings(
        self, changes: dict[str, Any], now: datetime | None = None
    ) -> None:
        """Merge changes into the settings map.

        Raises:
            ValidationFailedError: If a key is unknown or a value is invalid
        """
        result = validate_tenant_settings(changes)
        if isinstance(result, Invalid):
            raise ValidationFailedError(result.errors)

        before = dict(self.settings)
        after = {**before, **changes}
        if after == before:
            return

        self.settings = after
        self._pending_events.append(
            TenantSettingsUpdated(
                tenant_id=self.id.value,
                before=before,
                after=after,
                occurred_at=now or datetime.now(UTC),
            )
        )

    def deactivate(self, now: datetime | None = None) -> None:
        """Switch the tenant off. Principals and data are kept."""
        if not self.active:
            return
        self.active = False
        self._pending_events.append(
            TenantDeactivated(
                tenant_id=self.id.value, occurred_at=now or datetime.now(UTC)
            )
        )

    def activate(self, now: datetime | None = None) -> None:
        """Switch a deactivated tenant back on."""
        if self.active:
            return
        self.active = True
        self._pending_events.append(
            TenantActivated(
                tenant_id=self.id.value, occurred_at=now or datetime.now(UTC)
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
