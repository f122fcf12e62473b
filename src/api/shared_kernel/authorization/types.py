"""Authorization type definitions.

Defines the closed role set, the actions that can be authorized, and the
per-request Scope snapshot that authorization decisions are made against.
These enums ensure type safety and prevent hardcoded strings across the
codebase.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Role(StrEnum):
    """Principal roles.

    ROOT_ADMIN is global and never belongs to a tenant. Every other role is
    bound to exactly one tenant.
    """

    ROOT_ADMIN = "root_admin"
    TENANT_ADMIN = "tenant_admin"
    OPERATOR = "operator"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: str) -> Role:
        """Parse a role from its string form.

        Args:
            value: Role string (e.g. "operator")

        Returns:
            The matching Role

        Raises:
            ValueError: If value is not one of the known roles
        """
        try:
            return cls(value)
        except ValueError as e:
            raise ValueError(f"Invalid role: {value}") from e

    @property
    def is_admin(self) -> bool:
        """Whether this role may administer principals."""
        return self in (Role.ROOT_ADMIN, Role.TENANT_ADMIN)


class Action(StrEnum):
    """Actions that are subject to authorization."""

    MANAGE_USERS = "manage_users"
    MANAGE_INVENTORY = "manage_inventory"
    VIEW_REPORTS = "view_reports"
    VIEW_AUDIT_LOGS = "view_audit_logs"
    MANAGE_TENANT_SETTINGS = "manage_tenant_settings"


@dataclass(frozen=True)
class Scope:
    """Resolved identity of the caller for a single request.

    Built fresh from storage by the session service on every request and
    never cached, so that role or tenant changes take effect immediately.
    """

    principal_id: str
    email: str
    role: Role
    tenant_id: str | None

    @property
    def is_root_admin(self) -> bool:
        """Whether the scope belongs to a root admin."""
        return self.role == Role.ROOT_ADMIN
