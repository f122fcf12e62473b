"""Repository protocols (ports) for IAM bounded context.

Repository protocols define the interface for persisting and retrieving
aggregates. Implementations never commit; the calling service owns the
transaction.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from iam.domain.aggregates import Invitation, Principal, SessionToken, Tenant
from iam.domain.value_objects import (
    PrincipalId,
    SessionTokenId,
    TenantId,
    TokenContext,
)


@runtime_checkable
class IPrincipalRepository(Protocol):
    """Repository for Principal aggregate persistence."""

    async def save(self, principal: Principal) -> None:
        """Persist a principal aggregate (insert or update).

        Args:
            principal: The Principal aggregate to persist

        Raises:
            DuplicateEmailError: If another principal already uses the e-mail,
                either found by the pre-check or reported by the unique constraint
        """
        ...

    async def get_by_id(self, principal_id: PrincipalId) -> Principal | None:
        """Retrieve a principal by its ID."""
        ...

    async def get_by_email(self, email: str) -> Principal | None:
        """Retrieve a principal by e-mail (case-insensitive)."""
        ...

    async def list_by_tenant(self, tenant_id: TenantId | None) -> list[Principal]:
        """List principals of a tenant, or every principal when tenant_id is None."""
        ...

    async def delete(self, principal: Principal) -> bool:
        """Delete a principal.

        Returns:
            True if deleted, False if not found
        """
        ...


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregate persistence."""

    async def save(self, tenant: Tenant) -> None:
        """Persist a tenant aggregate (insert or update).

        Raises:
            DuplicateTenantSlugError: If the slug is already taken
        """
        ...

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by its ID."""
        ...

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Retrieve a tenant by slug."""
        ...

    async def list_all(self) -> list[Tenant]:
        """List all tenants ordered by name."""
        ...


@runtime_checkable
class ISessionTokenRepository(Protocol):
    """Repository for stored session token hashes."""

    async def add(self, token: SessionToken) -> None:
        """Persist a newly minted token."""
        ...

    async def get_by_hash(
        self, token_hash: str, context: TokenContext
    ) -> SessionToken | None:
        """Find a token by hash, only if it was issued for the given context."""
        ...

    async def delete_by_hash(self, token_hash: str) -> bool:
        """Delete one token.

        Returns:
            True if a token was deleted
        """
        ...

    async def delete_for_principal(
        self,
        principal_id: PrincipalId,
        context: TokenContext,
        except_hash: str | None = None,
    ) -> list[str]:
        """Delete a principal's tokens of one context.

        Args:
            principal_id: Owner of the tokens
            context: Only tokens of this context are removed
            except_hash: Hash of a token to keep (the caller's current session)

        Returns:
            Hashes of the deleted tokens
        """
        ...

    async def list_for_principal(
        self, principal_id: PrincipalId, context: TokenContext
    ) -> list[SessionToken]:
        """List a principal's tokens of one context."""
        ...

    async def delete_by_id(
        self,
        principal_id: PrincipalId,
        token_id: SessionTokenId,
        context: TokenContext,
    ) -> str | None:
        """Delete one of a principal's tokens of one context by id.

        Returns:
            Hash of the deleted token, or None if the principal owns no such token
        """
        ...


@runtime_checkable
class IInvitationRepository(Protocol):
    """Repository for Invitation aggregate persistence."""

    async def save(self, invitation: Invitation) -> None:
        """Persist an invitation aggregate (insert or update)."""
        ...

    async def get_by_token_hash(
        self, token_hash: str, for_update: bool = False
    ) -> Invitation | None:
        """Find an invitation by token hash.

        Args:
            token_hash: SHA-256 hex digest of the raw token
            for_update: Lock the row until the surrounding transaction ends
        """
        ...

    async def expire_pending_before(self, now: datetime) -> int:
        """Mark every pending invitation with expires_at < now as expired.

        Runs as a single conditional bulk update.

        Returns:
            Number of invitations expired
        """
        ...
