"""Domain probe for IAM repository operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to principal, tenant, session token and
invitation persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class _ContextualProbe:
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

    def with_context(self, context: ObservationContext):
        """Create a new probe with observation context bound."""
        return type(self)(logger=self._logger, context=context)


class PrincipalRepositoryProbe(Protocol):
    """Domain probe for principal repository operations."""

    def principal_saved(self, principal_id: str) -> None:
        """Record that a principal was successfully saved."""
        ...

    def principal_deleted(self, principal_id: str) -> None:
        """Record that a principal row was deleted."""
        ...

    def duplicate_email(self, email: str) -> None:
        """Record that an e-mail uniqueness violation was detected."""
        ...

    def with_context(self, context: ObservationContext) -> PrincipalRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPrincipalRepositoryProbe(_ContextualProbe):
    """Default implementation of PrincipalRepositoryProbe using structlog."""

    def principal_saved(self, principal_id: str) -> None:
        """Record that a principal was successfully saved."""
        self._logger.info(
            "principal_saved",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def principal_deleted(self, principal_id: str) -> None:
        """Record that a principal row was deleted."""
        self._logger.info(
            "principal_deleted",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def duplicate_email(self, email: str) -> None:
        """Record that an e-mail uniqueness violation was detected."""
        self._logger.warning(
            "duplicate_email",
            email=email,
            **self._get_context_kwargs(),
        )


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant repository operations."""

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was successfully saved."""
        ...

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        ...

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate tenant slug was detected."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRepositoryProbe(_ContextualProbe):
    """Default implementation of TenantRepositoryProbe using structlog."""

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was successfully saved."""
        self._logger.info(
            "tenant_saved",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        self._logger.debug(
            "tenants_listed",
            count=count,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate tenant slug was detected."""
        self._logger.warning(
            "duplicate_tenant_slug",
            slug=slug,
            **self._get_context_kwargs(),
        )


class SessionTokenRepositoryProbe(Protocol):
    """Domain probe for session token repository operations.

    Token hashes are never logged.
    """

    def token_stored(self, principal_id: str, context: str) -> None:
        """Record that a token digest was stored."""
        ...

    def tokens_deleted(self, principal_id: str, context: str, count: int) -> None:
        """Record that a principal's tokens were bulk deleted."""
        ...

    def with_context(self, context: ObservationContext) -> SessionTokenRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSessionTokenRepositoryProbe(_ContextualProbe):
    """Default implementation of SessionTokenRepositoryProbe using structlog."""

    def token_stored(self, principal_id: str, context: str) -> None:
        """Record that a token digest was stored."""
        self._logger.debug(
            "session_token_stored",
            principal_id=principal_id,
            token_context=context,
            **self._get_context_kwargs(),
        )

    def tokens_deleted(self, principal_id: str, context: str, count: int) -> None:
        """Record that a principal's tokens were bulk deleted."""
        self._logger.info(
            "session_tokens_deleted",
            principal_id=principal_id,
            token_context=context,
            count=count,
            **self._get_context_kwargs(),
        )


class InvitationRepositoryProbe(Protocol):
    """Domain probe for invitation repository operations."""

    def invitation_saved(self, invitation_id: str, status: str) -> None:
        """Record that an invitation was successfully saved."""
        ...

    def invitations_expired(self, count: int) -> None:
        """Record the result of a bulk expiry update."""
        ...

    def with_context(self, context: ObservationContext) -> InvitationRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultInvitationRepositoryProbe(_ContextualProbe):
    """Default implementation of InvitationRepositoryProbe using structlog."""

    def invitation_saved(self, invitation_id: str, status: str) -> None:
        """Record that an invitation was successfully saved."""
        self._logger.info(
            "invitation_saved",
            invitation_id=invitation_id,
            status=status,
            **self._get_context_kwargs(),
        )

    def invitations_expired(self, count: int) -> None:
        """Record the result of a bulk expiry update."""
        self._logger.debug(
            "invitations_bulk_expired",
            count=count,
            **self._get_context_kwargs(),
        )
