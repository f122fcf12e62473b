"""Protocol for authentication observability.

Defines the interface for domain probes that capture sign in, sign out and
session authentication events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthenticationProbe(Protocol):
    """Domain probe for authentication operations."""

    def login_succeeded(
        self,
        principal_id: str,
        remember_me: bool,
    ) -> None:
        """Record a successful password sign in."""
        ...

    def login_failed(self) -> None:
        """Record a refused password sign in."""
        ...

    def logged_out(self, principal_id: str | None) -> None:
        """Record a sign out."""
        ...

    def magic_link_requested(self, delivered: bool) -> None:
        """Record a sign-in link request.

        Args:
            delivered: False when the e-mail matched no active principal
        """
        ...

    def magic_link_login_succeeded(self, principal_id: str) -> None:
        """Record a sign in through a mailed link."""
        ...

    def authentication_failed(
        self,
        reason: str,
    ) -> None:
        """Record that a request carried no usable session."""
        ...

    def with_context(self, context: ObservationContext) -> AuthenticationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthenticationProbe:
    """Default implementation of AuthenticationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthenticationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthenticationProbe(logger=self._logger, context=context)

    def login_succeeded(
        self,
        principal_id: str,
        remember_me: bool,
    ) -> None:
        """Record a successful password sign in."""
        self._logger.info(
            "login_succeeded",
            principal_id=principal_id,
            remember_me=remember_me,
            **self._get_context_kwargs(),
        )

    def login_failed(self) -> None:
        """Record a refused password sign in."""
        self._logger.warning(
            "login_failed",
            **self._get_context_kwargs(),
        )

    def logged_out(self, principal_id: str | None) -> None:
        """Record a sign out."""
        self._logger.info(
            "logged_out",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def magic_link_requested(self, delivered: bool) -> None:
        """Record a sign-in link request."""
        self._logger.info(
            "magic_link_requested",
            delivered=delivered,
            **self._get_context_kwargs(),
        )

    def magic_link_login_succeeded(self, principal_id: str) -> None:
        """Record a sign in through a mailed link."""
        self._logger.info(
            "magic_link_login_succeeded",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def authentication_failed(
        self,
        reason: str,
    ) -> None:
        """Record that a request carried no usable session."""
        self._logger.info(
            "authentication_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )
