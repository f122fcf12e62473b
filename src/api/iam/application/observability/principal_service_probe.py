"""Protocol for principal service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PrincipalServiceProbe(Protocol):
    """Domain probe for principal administration."""

    def principal_created(self, principal_id: str, role: str) -> None:
        """Record that a principal was created."""
        ...

    def principal_updated(self, principal_id: str, change: str) -> None:
        """Record that a principal was changed (role, status)."""
        ...

    def principal_deleted(self, principal_id: str) -> None:
        """Record that a principal was deleted."""
        ...

    def principal_not_found(self, principal_id: str) -> None:
        """Record that a principal was not found or is outside the caller's tenant."""
        ...

    def principal_operation_failed(
        self, operation: str, principal_id: str | None, error: str
    ) -> None:
        """Record that an administration operation failed."""
        ...

    def principals_listed(self, tenant_id: str | None, count: int) -> None:
        """Record that principals were listed."""
        ...

    def with_context(self, context: ObservationContext) -> PrincipalServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPrincipalServiceProbe:
    """Default implementation of PrincipalServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultPrincipalServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultPrincipalServiceProbe(logger=self._logger, context=context)

    def principal_created(self, principal_id: str, role: str) -> None:
        """Record that a principal was created."""
        self._logger.info(
            "principal_created",
            principal_id=principal_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def principal_updated(self, principal_id: str, change: str) -> None:
        """Record that a principal was changed (role, status)."""
        self._logger.info(
            "principal_updated",
            principal_id=principal_id,
            change=change,
            **self._get_context_kwargs(),
        )

    def principal_deleted(self, principal_id: str) -> None:
        """Record that a principal was deleted."""
        self._logger.info(
            "principal_deleted",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def principal_not_found(self, principal_id: str) -> None:
        """Record that a principal was not found or is outside the caller's tenant."""
        self._logger.debug(
            "principal_not_found",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def principal_operation_failed(
        self, operation: str, principal_id: str | None, error: str
    ) -> None:
        """Record that an administration operation failed."""
        self._logger.warning(
            "principal_operation_failed",
            operation=operation,
            principal_id=principal_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def principals_listed(self, tenant_id: str | None, count: int) -> None:
        """Record that principals were listed."""
        self._logger.debug(
            "principals_listed",
            tenant_id=tenant_id,
            count=count,
            **self._get_context_kwargs(),
        )
