"""Tenant domain events for IAM context.

Domain events related to tenant lifecycle and configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class TenantCreated:
    """Event raised when a new tenant is created.

    Attributes:
        tenant_id: The ULID of the created tenant
        name: The name of the tenant
        slug: The URL-safe unique handle of the tenant
        occurred_at: When the event occurred (UTC)
    """

    tenant_id: str
    name: str
    slug: str
    occurred_at: datetime


@dataclass(frozen=True)
class TenantSettingsUpdated:
    """Event raised when a tenant's settings map changes.

    Attributes:
        tenant_id: The tenant whose settings changed
        before: Settings prior to the change
        after: Settings after the change
        occurred_at: When the event occurred (UTC)
    """

    tenant_id: str
    before: dict[str, Any]
    after: dict[str, Any]
    occurred_at: datetime


@dataclass(frozen=True)
class TenantDeactivated:
    """Event raised when a tenant is switched off."""

    tenant_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class TenantActivated:
    """Event raised when a deactivated tenant is switched back on."""

    tenant_id: str
    occurred_at: datetime
