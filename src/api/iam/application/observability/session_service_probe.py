"""Protocol for session service observability.

Defines the interface for domain probes that capture application-level
domain events for session issuance, resolution and revocation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class SessionServiceProbe(Protocol):
    """Domain probe for session service operations."""

    def session_issued(self, principal_id: str, remember_me: bool) -> None:
        """Record that a session token was minted."""
        ...

    def session_resolved(self, principal_id: str) -> None:
        """Record that a session token resolved to a scope."""
        ...

    def session_reissued(self, principal_id: str) -> None:
        """Record that an aging session token was rotated."""
        ...

    def session_expired(self, principal_id: str) -> None:
        """Record that a session token was rejected for inactivity."""
        ...

    def session_not_found(self, reason: str) -> None:
        """Record that a session token could not be resolved."""
        ...

    def session_revoked(self, found: bool) -> None:
        """Record that a single session token was revoked."""
        ...

    def sessions_revoked(
        self, principal_id: str, count: int, kept_current: bool
    ) -> None:
        """Record that a principal's sessions were revoked in bulk."""
        ...

    def email_token_issued(self, principal_id: str, context: str) -> None:
        """Record that a mailed token was minted."""
        ...

    def email_token_consumed(self, principal_id: str, context: str) -> None:
        """Record that a mailed token was used."""
        ...

    def email_token_rejected(self, context: str, reason: str) -> None:
        """Record that a mailed token was refused."""
        ...

    def with_context(self, context: ObservationContext) -> SessionServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSessionServiceProbe:
    """Default implementation of SessionServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultSessionServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultSessionServiceProbe(logger=self._logger, context=context)

    def session_issued(self, principal_id: str, remember_me: bool) -> None:
        """Record that a session token was minted."""
        self._logger.info(
            "session_issued",
            principal_id=principal_id,
            remember_me=remember_me,
            **self._get_context_kwargs(),
        )

    def session_resolved(self, principal_id: str) -> None:
        """Record that a session token resolved to a scope."""
        self._logger.debug(
            "session_resolved",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def session_reissued(self, principal_id: str) -> None:
        """Record that an aging session token was rotated."""
        self._logger.info(
            "session_reissued",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def session_expired(self, principal_id: str) -> None:
        """Record that a session token was rejected for inactivity."""
        self._logger.info(
            "session_expired",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def session_not_found(self, reason: str) -> None:
        """Record that a session token could not be resolved."""
        self._logger.debug(
            "session_not_found",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def session_revoked(self, found: bool) -> None:
        """Record that a single session token was revoked."""
        self._logger.info(
            "session_revoked",
            found=found,
            **self._get_context_kwargs(),
        )

    def sessions_revoked(
        self, principal_id: str, count: int, kept_current: bool
    ) -> None:
        """Record that a principal's sessions were revoked in bulk."""
        self._logger.info(
            "sessions_revoked",
            principal_id=principal_id,
            count=count,
            kept_current=kept_current,
            **self._get_context_kwargs(),
        )

    def email_token_issued(self, principal_id: str, context: str) -> None:
        """Record that a mailed token was minted."""
        self._logger.info(
            "email_token_issued",
            principal_id=principal_id,
            token_context=context,
            **self._get_context_kwargs(),
        )

    def email_token_consumed(self, principal_id: str, context: str) -> None:
        """Record that a mailed token was used."""
        self._logger.info(
            "email_token_consumed",
            principal_id=principal_id,
            token_context=context,
            **self._get_context_kwargs(),
        )

    def email_token_rejected(self, context: str, reason: str) -> None:
        """Record that a mailed token was refused."""
        self._logger.info(
            "email_token_rejected",
            token_context=context,
            reason=reason,
            **self._get_context_kwargs(),
        )
