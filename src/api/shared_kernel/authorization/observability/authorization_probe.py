"""Domain probe for authorization operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to authorization decisions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthorizationProbe(Protocol):
    """Domain probe for authorization operations."""

    def permission_checked(
        self,
        principal_id: str | None,
        action: str,
        resource_tenant_id: str | None,
        granted: bool,
    ) -> None:
        """Record that a permission was checked."""
        ...

    def permission_denied(
        self,
        principal_id: str | None,
        action: str,
        resource_tenant_id: str | None,
        required_roles: list[str],
    ) -> None:
        """Record that a guarded action was refused."""
        ...

    def cross_tenant_access_attempted(
        self,
        principal_id: str,
        own_tenant_id: str | None,
        requested_tenant_id: str | None,
    ) -> None:
        """Record that a caller asked for another tenant's data."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizationProbe:
    """Default implementation of AuthorizationProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuthorizationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizationProbe(logger=self._logger, context=context)

    def permission_checked(
        self,
        principal_id: str | None,
        action: str,
        resource_tenant_id: str | None,
        granted: bool,
    ) -> None:
        """Record that a permission was checked."""
        self._logger.debug(
            "permission_checked",
            principal_id=principal_id,
            action=action,
            resource_tenant_id=resource_tenant_id,
            granted=granted,
            **self._get_context_kwargs(),
        )

    def permission_denied(
        self,
        principal_id: str | None,
        action: str,
        resource_tenant_id: str | None,
        required_roles: list[str],
    ) -> None:
        """Record that a guarded action was refused."""
        self._logger.warning(
            "permission_denied",
            principal_id=principal_id,
            action=action,
            resource_tenant_id=resource_tenant_id,
            required_roles=required_roles,
            **self._get_context_kwargs(),
        )

    def cross_tenant_access_attempted(
        self,
        principal_id: str,
        own_tenant_id: str | None,
        requested_tenant_id: str | None,
    ) -> None:
        """Record that a caller asked for another tenant's data."""
        self._logger.warning(
            "cross_tenant_access_attempted",
            principal_id=principal_id,
            own_tenant_id=own_tenant_id,
            requested_tenant_id=requested_tenant_id,
            **self._get_context_kwargs(),
        )
