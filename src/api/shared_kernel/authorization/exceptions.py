"""Authorization errors shared by every bounded context."""

from __future__ import annotations

from shared_kernel.authorization.types import Action, Role
from shared_kernel.exceptions import IdentityError


class UnauthorizedError(IdentityError):
    """Raised when a scope lacks permission to perform an action.

    The message is deliberately generic. The details (action, required
    roles, resource tenant) are kept on the instance for audit entries and
    must never be echoed to the caller.
    """

    code = "unauthorized"

    def __init__(
        self,
        action: Action | None = None,
        required_roles: frozenset[Role] = frozenset(),
        resource_tenant_id: str | None = None,
    ) -> None:
        super().__init__("You are not authorized to perform this action")
        self.action = action
        self.required_roles = required_roles
        self.resource_tenant_id = resource_tenant_id
