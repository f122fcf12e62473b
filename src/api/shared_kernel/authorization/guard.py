"""Tenant isolation guard.

Wraps the pure policy with the side effects a denial needs: an audit entry
describing what was attempted and a probe event. Every mutating operation
that touches tenant-owned data goes through ``require``.
"""

from __future__ import annotations

from typing import Any

from shared_kernel.audit.ports import IAuditLogger, RequestContext
from shared_kernel.authorization.exceptions import UnauthorizedError
from shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from shared_kernel.authorization.policy import (
    can,
    can_grant,
    required_roles,
    roles_allowed_to_grant,
)
from shared_kernel.authorization.types import Action, Role, Scope

AUTHORIZATION_DENIED = "authorization.denied"


class TenantIsolationGuard:
    """Enforces role permissions and tenant boundaries."""

    def __init__(
        self,
        audit: IAuditLogger,
        probe: AuthorizationProbe | None = None,
    ) -> None:
        self._audit = audit
        self._probe = probe or DefaultAuthorizationProbe()

    def authorize(
        self, scope: Scope | None, action: Action, resource_tenant_id: str | None
    ) -> bool:
        """Check a permission without side effects beyond observability."""
        granted = can(scope, action, resource_tenant_id)
        self._probe.permission_checked(
            principal_id=scope.principal_id if scope else None,
            action=action.value,
            resource_tenant_id=resource_tenant_id,
            granted=granted,
        )
        return granted

    async def require(
        self,
        scope: Scope | None,
        action: Action,
        resource_tenant_id: str | None,
        request: RequestContext | None = None,
    ) -> None:
        """Ensure the scope may perform the action, auditing any denial.

        Raises:
            UnauthorizedError: If the policy denies the action
        """
        if self.authorize(scope, action, resource_tenant_id):
            return
        await self._deny(
            scope, action, required_roles(action), resource_tenant_id, request
        )

    async def require_grant(
        self,
        scope: Scope,
        role: Role,
        resource_tenant_id: str | None,
        request: RequestContext | None = None,
    ) -> None:
        """Ensure the scope may assign (or take away) the given role.

        Raises:
            UnauthorizedError: If only a more privileged role may grant it
        """
        if can_grant(scope, role):
            return
        await self._deny(
            scope,
            Action.MANAGE_USERS,
            roles_allowed_to_grant(role),
            resource_tenant_id,
            request,
            attempted_role=role.value,
        )

    async def _deny(
        self,
        scope: Scope | None,
        action: Action,
        roles: frozenset[Role],
        resource_tenant_id: str | None,
        request: RequestContext | None,
        **details: Any,
    ) -> None:
        role_names = sorted(role.value for role in roles)
        self._probe.permission_denied(
            principal_id=scope.principal_id if scope else None,
            action=action.value,
            resource_tenant_id=resource_tenant_id,
            required_roles=role_names,
        )
        await self._audit.record(
            scope,
            AUTHORIZATION_DENIED,
            tenant_id=resource_tenant_id,
            resource_type="authorization",
            changes={
                "action": action.value,
                "actor_role": scope.role.value if scope else None,
                "actor_tenant_id": scope.tenant_id if scope else None,
                "required_roles": role_names,
                "resource_tenant_id": resource_tenant_id,
                **details,
            },
            request=request,
        )
        raise UnauthorizedError(
            action=action,
            required_roles=roles,
            resource_tenant_id=resource_tenant_id,
        )

    def effective_tenant(
        self, scope: Scope, requested_tenant_id: str | None
    ) -> str | None:
        """Resolve which tenant a query may read.

        Root admins may read any tenant (or all, with None). Everyone else
        is pinned to their own tenant regardless of what they asked for.
        """
        if scope.is_root_admin:
            return requested_tenant_id

        if requested_tenant_id is not None and requested_tenant_id != scope.tenant_id:
            self._probe.cross_tenant_access_attempted(
                principal_id=scope.principal_id,
                own_tenant_id=scope.tenant_id,
                requested_tenant_id=requested_tenant_id,
            )
        return scope.tenant_id
