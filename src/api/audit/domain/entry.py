"""Audit entry and query value objects.

Entries are immutable once built. The actor's e-mail and role are copied
into the entry so it stays readable after the principal is deleted.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ulid import ULID

from shared_kernel.authorization.types import Scope

REDACTED = "[REDACTED]"
SENSITIVE_KEY_SUFFIXES = frozenset({"password", "token", "secret", "hash"})
MAX_IP_LENGTH = 45
MAX_USER_AGENT_LENGTH = 512
MAX_PAGE_SIZE = 500


def redact(value: Any) -> Any:
    """Replace values stored under sensitive keys, recursing into containers.

    A key is sensitive when its last ``_``-separated word names a secret, as
    in ``new_password`` or ``token_hash``. Booleans are flags such as
    ``must_change_password`` and are kept.
    """
    if isinstance(value, dict):
        return {
            key: REDACTED if _is_sensitive(key, item) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


def _is_sensitive(key: Any, value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return str(key).lower().rsplit("_", 1)[-1] in SENSITIVE_KEY_SUFFIXES


def normalize_ip(value: str | None) -> str | None:
    """Return the canonical IPv4/IPv6 text, or None when absent or invalid."""
    if not value or len(value) > MAX_IP_LENGTH:
        return None
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None


@dataclass(frozen=True)
class AuditEntry:
    """One immutable audit log row."""

    id: str
    action: str
    occurred_at: datetime
    actor_id: str | None = None
    actor_email: str | None = None
    actor_role: str | None = None
    tenant_id: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    changes: dict[str, Any] = field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None

    @classmethod
    def create(
        cls,
        actor: Scope | None,
        action: str,
        occurred_at: datetime,
        tenant_id: str | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        changes: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditEntry:
        """Build an entry, snapshotting the actor and redacting secrets.

        Args:
            actor: Scope of the acting principal, None for system actions
            action: Namespaced action name
            occurred_at: When the action happened
            tenant_id: Tenant the action applies to
            resource_type: Type of the affected resource
            resource_id: Identifier of the affected resource
            changes: Details of the change; sensitive keys are redacted
            ip_address: Client address; dropped when not a valid IP
            user_agent: Client user agent; truncated
        """
        return cls(
            id=str(ULID()),
            action=action,
            occurred_at=occurred_at,
            actor_id=actor.principal_id if actor else None,
            actor_email=actor.email if actor else None,
            actor_role=actor.role.value if actor else None,
            tenant_id=tenant_id,
            resource_type=resource_type,
            resource_id=resource_id,
            changes=redact(changes or {}),
            ip_address=normalize_ip(ip_address),
            user_agent=user_agent[:MAX_USER_AGENT_LENGTH] if user_agent else None,
        )


@dataclass(frozen=True)
class AuditFilters:
    """Query filters for the audit log. Pagination is caller supplied."""

    action: str | None = None
    resource_type: str | None = None
    actor_id: str | None = None
    occurred_after: datetime | None = None
    occurred_before: datetime | None = None
    limit: int = 50
    offset: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if self.offset < 0:
            raise ValueError("offset must not be negative")


@dataclass(frozen=True)
class ActivitySummary:
    """Recent sign-in activity for a tenant (or every tenant)."""

    tenant_id: str | None
    logins_last_7_days: int
    logins_last_30_days: int
    recent: list[AuditEntry]
