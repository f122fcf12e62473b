"""Protocol for credential service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CredentialServiceProbe(Protocol):
    """Domain probe for credential verification and password changes."""

    def credentials_verified(self, principal_id: str) -> None:
        """Record that an e-mail/password pair was accepted."""
        ...

    def credentials_rejected(self, reason: str) -> None:
        """Record that an e-mail/password pair was refused.

        The reason is for operators only and is never returned to callers.
        """
        ...

    def password_changed(self, principal_id: str, sessions_revoked: int) -> None:
        """Record that a principal changed their password."""
        ...

    def password_change_failed(self, principal_id: str, error: str) -> None:
        """Record that a password change was refused."""
        ...

    def temporary_password_issued(self, principal_id: str) -> None:
        """Record that an administrator reset a password."""
        ...

    def password_reset_failed(self, principal_id: str, error: str) -> None:
        """Record that an administrator's password reset failed."""
        ...

    def email_change_requested(self, principal_id: str) -> None:
        """Record that confirmation of a new e-mail address was mailed."""
        ...

    def email_changed(self, principal_id: str) -> None:
        """Record that a principal confirmed a new e-mail address."""
        ...

    def email_change_failed(self, principal_id: str, error: str) -> None:
        """Record that an e-mail change was refused."""
        ...

    def with_context(self, context: ObservationContext) -> CredentialServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCredentialServiceProbe:
    """Default implementation of CredentialServiceProbe using structlog."""

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
    ) -> DefaultCredentialServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultCredentialServiceProbe(logger=self._logger, context=context)

    def credentials_verified(self, principal_id: str) -> None:
        self._logger.debug(
            "credentials_verified",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def credentials_rejected(self, reason: str) -> None:
        self._logger.info(
            "credentials_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def password_changed(self, principal_id: str, sessions_revoked: int) -> None:
        self._logger.info(
            "password_changed",
            principal_id=principal_id,
            sessions_revoked=sessions_revoked,
            **self._get_context_kwargs(),
        )

    def password_change_failed(self, principal_id: str, error: str) -> None:
        self._logger.warning(
            "password_change_failed",
            principal_id=principal_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def temporary_password_issued(self, principal_id: str) -> None:
        self._logger.info(
            "temporary_password_issued",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def password_reset_failed(self, principal_id: str, error: str) -> None:
        self._logger.warning(
            "password_reset_failed",
            principal_id=principal_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def email_change_requested(self, principal_id: str) -> None:
        self._logger.info(
            "email_change_requested",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def email_changed(self, principal_id: str) -> None:
        self._logger.info(
            "email_changed",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def email_change_failed(self, principal_id: str, error: str) -> None:
        self._logger.warning(
            "email_change_failed",
            principal_id=principal_id,
            error=error,
            **self._get_context_kwargs(),
        )
