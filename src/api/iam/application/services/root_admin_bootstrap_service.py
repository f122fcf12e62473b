"""Root admin bootstrap service for IAM bounded context.

Creates the first root admin at application startup so that tenants can
be provisioned on a fresh database. Runs without an acting scope and with
minimal dependencies.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.security import hash_password
from iam.domain.aggregates import Principal
from iam.ports.exceptions import DuplicateEmailError, ValidationFailedError
from iam.ports.repositories import IPrincipalRepository
from infrastructure.observability.startup_probe import (
    DefaultStartupProbe,
    StartupProbe,
)
from shared_kernel.authorization.types import Role


class RootAdminBootstrapService:
    """Bootstrap service for the initial root admin account.

    Unlike PrincipalService, this service:
    - Does not require an acting scope or the authorization guard
    - Does not write audit entries (there is no actor yet)
    - Uses StartupProbe instead of PrincipalServiceProbe
    """

    def __init__(
        self,
        principal_repository: IPrincipalRepository,
        session: AsyncSession,
        bcrypt_rounds: int = 12,
        probe: StartupProbe | None = None,
    ):
        """Initialize RootAdminBootstrapService with dependencies.

        Args:
            principal_repository: Repository for principal persistence
            session: Database session for transaction management
            bcrypt_rounds: bcrypt work factor for the initial password
            probe: Optional startup probe for observability
        """
        self._principals = principal_repository
        self._session = session
        self._bcrypt_rounds = bcrypt_rounds
        self._probe = probe or DefaultStartupProbe()

    async def ensure_root_admin(self, email: str, password: str) -> Principal:
        """Ensure a root admin with the given e-mail exists.

        Idempotent, and tolerates several instances starting at once. The
        password only applies when the account is created; the admin must
        change it at first sign in.

        Raises:
            ValidationFailedError: If an existing account with that e-mail
                is not a root admin
            RuntimeError: If the account can be neither created nor found
        """
        async with self._session.begin():
            principal = await self._principals.get_by_email(email)
            if principal is None:
                principal = await self._create_with_race_handling(email, password)
            elif principal.role != Role.ROOT_ADMIN:
                raise ValidationFailedError(
                    {"email": ["belongs to an account that is not a root admin"]}
                )
            else:
                self._probe.root_admin_already_exists(principal.id.value, email)

        if principal is None:
            raise RuntimeError("Failed to create or retrieve the root admin")
        return principal

    async def _create_with_race_handling(
        self, email: str, password: str
    ) -> Principal | None:
        principal = Principal.create(
            email=email,
            role=Role.ROOT_ADMIN,
            tenant_id=None,
            password_hash=hash_password(password, self._bcrypt_rounds),
            must_change_password=True,
        )
        try:
            # Savepoint so a constraint violation leaves the transaction usable
            async with self._session.begin_nested():
                await self._principals.save(principal)
        except DuplicateEmailError:
            # Another instance created it concurrently, re-query
            concurrent = await self._principals.get_by_email(email)
            if concurrent:
                self._probe.root_admin_already_exists(concurrent.id.value, email)
            return concurrent

        self._probe.root_admin_bootstrapped(principal.id.value, principal.email)
        return principal
