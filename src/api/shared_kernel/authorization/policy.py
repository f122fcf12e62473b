"""Role-based authorization policy.

Pure functions with no I/O. Rules are evaluated in order and the first
match wins; anything not matched is denied.
"""

from __future__ import annotations

from shared_kernel.authorization.types import Action, Role, Scope

TENANT_ROLE_ACTIONS: dict[Role, frozenset[Action]] = {
    Role.TENANT_ADMIN: frozenset(Action),
    Role.OPERATOR: frozenset({Action.MANAGE_INVENTORY, Action.VIEW_REPORTS}),
    Role.VIEWER: frozenset({Action.VIEW_REPORTS}),
}

# Roles that only a root admin may grant
PRIVILEGED_ROLES: frozenset[Role] = frozenset({Role.ROOT_ADMIN, Role.TENANT_ADMIN})


def can(scope: Scope | None, action: Action, resource_tenant_id: str | None) -> bool:
    """Decide whether a scope may perform an action on a tenant's resource.

    Args:
        scope: The caller's resolved scope (None for anonymous callers)
        action: The action being attempted
        resource_tenant_id: Tenant owning the target resource

    Returns:
        True if allowed, False otherwise
    """
    if scope is None:
        return False

    if scope.role == Role.ROOT_ADMIN:
        return True

    allowed = TENANT_ROLE_ACTIONS.get(scope.role, frozenset())
    if scope.tenant_id is None or resource_tenant_id is None:
        return False

    return scope.tenant_id == resource_tenant_id and action in allowed


def required_roles(action: Action) -> frozenset[Role]:
    """Return the set of roles allowed to perform an action.

    Used when recording denials so the audit entry states what would have
    been needed.
    """
    roles = {role for role, actions in TENANT_ROLE_ACTIONS.items() if action in actions}
    roles.add(Role.ROOT_ADMIN)
    return frozenset(roles)


def can_grant(scope: Scope, role: Role) -> bool:
    """Whether a scope may assign the given role to another principal.

    Only root admins may grant privileged roles.
    """
    if role in PRIVILEGED_ROLES:
        return scope.role == Role.ROOT_ADMIN
    return scope.role.is_admin


def roles_allowed_to_grant(role: Role) -> frozenset[Role]:
    """Return the set of roles that may assign the given role."""
    if role in PRIVILEGED_ROLES:
        return frozenset({Role.ROOT_ADMIN})
    return frozenset({Role.ROOT_ADMIN, Role.TENANT_ADMIN})
