"""Domain probe for audit logging.

A failed append is never raised to the caller, so this probe is the only
place the failure becomes visible.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuditProbe(Protocol):
    """Domain probe for audit service operations."""

    def entry_recorded(self, action: str, tenant_id: str | None) -> None:
        """Record that an audit entry was written."""
        ...

    def entry_record_failed(
        self, action: str, tenant_id: str | None, error: str
    ) -> None:
        """Record that writing an audit entry failed and was dropped."""
        ...

    def entries_queried(self, tenant_id: str | None, count: int) -> None:
        """Record that audit entries were read."""
        ...

    def activity_summary_served(self, tenant_id: str | None, cached: bool) -> None:
        """Record that an activity summary was returned."""
        ...

    def with_context(self, context: ObservationContext) -> AuditProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuditProbe:
    """Default implementation of AuditProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuditProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuditProbe(logger=self._logger, context=context)

    def entry_recorded(self, action: str, tenant_id: str | None) -> None:
        self._logger.debug(
            "audit_entry_recorded",
            audit_action=action,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def entry_record_failed(
        self, action: str, tenant_id: str | None, error: str
    ) -> None:
        self._logger.error(
            "audit_entry_record_failed",
            audit_action=action,
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def entries_queried(self, tenant_id: str | None, count: int) -> None:
        self._logger.debug(
            "audit_entries_queried",
            tenant_id=tenant_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def activity_summary_served(self, tenant_id: str | None, cached: bool) -> None:
        self._logger.debug(
            "audit_activity_summary_served",
            tenant_id=tenant_id,
            cached=cached,
            **self._get_context_kwargs(),
        )
