"""Authorization primitives for role-based access control.

This module provides the shared role/action types, the pure policy, and the
tenant isolation guard used across bounded contexts.
"""

from shared_kernel.authorization.exceptions import UnauthorizedError
from shared_kernel.authorization.policy import (
    can,
    can_grant,
    required_roles,
    roles_allowed_to_grant,
)
from shared_kernel.authorization.types import Action, Role, Scope

__all__ = [
    "Action",
    "Role",
    "Scope",
    "UnauthorizedError",
    "can",
    "can_grant",
    "required_roles",
    "roles_allowed_to_grant",
]
