"""Protocol for invitation service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class InvitationServiceProbe(Protocol):
    """Domain probe for invitation lifecycle operations."""

    def invitation_created(
        self, invitation_id: str, tenant_id: str, role: str
    ) -> None:
        """Record that an invitation was issued."""
        ...

    def invitation_creation_failed(self, tenant_id: str, error: str) -> None:
        """Record that issuing an invitation failed."""
        ...

    def invitation_redeemed(self, invitation_id: str, principal_id: str) -> None:
        """Record that an invitation was accepted."""
        ...

    def invitation_redeem_failed(self, reason: str) -> None:
        """Record that an invitation could not be redeemed."""
        ...

    def invitations_swept(self, count: int) -> None:
        """Record the result of an expiry sweep."""
        ...

    def with_context(self, context: ObservationContext) -> InvitationServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultInvitationServiceProbe:
    """Default implementation of InvitationServiceProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultInvitationServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultInvitationServiceProbe(logger=self._logger, context=context)

    def invitation_created(
        self, invitation_id: str, tenant_id: str, role: str
    ) -> None:
        self._logger.info(
            "invitation_created",
            invitation_id=invitation_id,
            tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def invitation_creation_failed(self, tenant_id: str, error: str) -> None:
        self._logger.warning(
            "invitation_creation_failed",
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def invitation_redeemed(self, invitation_id: str, principal_id: str) -> None:
        self._logger.info(
            "invitation_redeemed",
            invitation_id=invitation_id,
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def invitation_redeem_failed(self, reason: str) -> None:
        self._logger.info(
            "invitation_redeem_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def invitations_swept(self, count: int) -> None:
        self._logger.info(
            "invitations_swept",
            count=count,
            **self._get_context_kwargs(),
        )
