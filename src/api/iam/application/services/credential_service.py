"""Credential application service for IAM bounded context.

Verifies e-mail/password pairs, changes passwords and e-mail addresses,
and issues temporary passwords on administrative reset.
"""

from __future__ import annotations

from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.audit_translation import record_events
from iam.application.observability import (
    CredentialServiceProbe,
    DefaultCredentialServiceProbe,
)
from iam.application.security import (
    generate_temporary_password,
    hash_password,
    verify_password,
)
from iam.application.services.session_service import SessionService
from iam.application.value_objects import TemporaryPassword
from iam.domain.aggregates import Principal
from iam.domain.validation import (
    Invalid,
    normalize_email,
    validate_email,
    validate_password,
)
from iam.domain.value_objects import PrincipalId, TokenContext
from iam.ports.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    PrincipalNotFoundError,
    SessionNotFoundError,
    ValidationFailedError,
)
from iam.ports.notifications import IEmailChangeNotifier
from iam.ports.repositories import IPrincipalRepository
from shared_kernel.audit.ports import IAuditLogger, RequestContext
from shared_kernel.authorization.guard import TenantIsolationGuard
from shared_kernel.authorization.types import Action, Scope
from shared_kernel.clock import Clock, utc_now

EMAIL_CHANGE_REQUESTED = "principal.email_change_requested"


class CredentialService:
    """Application service for password and e-mail credentials.

    Manages database transactions. Plaintext passwords are only ever held
    in memory for the duration of a call.
    """

    def __init__(
        self,
        session: AsyncSession,
        principal_repository: IPrincipalRepository,
        session_service: SessionService,
        guard: TenantIsolationGuard,
        audit: IAuditLogger,
        email_change_notifier: IEmailChangeNotifier,
        min_password_length: int = 12,
        bcrypt_rounds: int = 12,
        probe: CredentialServiceProbe | None = None,
        clock: Clock = utc_now,
    ):
        self._session = session
        self._principals = principal_repository
        self._sessions = session_service
        self._guard = guard
        self._audit = audit
        self._email_changes = email_change_notifier
        self._min_password_length = min_password_length
        self._bcrypt_rounds = bcrypt_rounds
        self._probe = probe or DefaultCredentialServiceProbe()
        self._clock = clock

    async def find_by_email(self, email: str) -> Principal | None:
        """Look up a principal by e-mail regardless of status."""
        async with self._session.begin():
            return await self._principals.get_by_email(normalize_email(email))

    async def verify(self, email: str, password: str) -> Principal | None:
        """Check an e-mail/password pair.

        A bcrypt comparison runs whether or not the e-mail is known, so the
        two failure cases take the same time. Callers only learn success or
        failure.

        Returns:
            The active principal on success, None otherwise
        """
        principal = await self.find_by_email(email)
        stored_hash = principal.password_hash if principal else None
        matched = verify_password(password, stored_hash, self._bcrypt_rounds)

        if principal is None:
            self._probe.credentials_rejected("unknown_email")
            return None
        if not matched:
            self._probe.credentials_rejected("password_mismatch")
            return None
        if not principal.is_active:
            self._probe.credentials_rejected("inactive")
            return None

        self._probe.credentials_verified(principal.id.value)
        return principal

    async def record_login(self, principal: Principal) -> None:
        """Stamp last_login_at after a successful sign in."""
        async with self._session.begin():
            principal.record_login(self._clock())
            await self._principals.save(principal)

    async def reset_to_temporary(self, principal: Principal) -> TemporaryPassword:
        """Replace a principal's password with a generated temporary one.

        The principal must change it at next sign in. The plaintext is
        returned once and never stored. Runs inside the caller's transaction.
        """
        temporary = generate_temporary_password()
        principal.reset_password(
            hash_password(temporary, rounds=self._bcrypt_rounds), self._clock()
        )
        await self._principals.save(principal)
        self._probe.temporary_password_issued(principal.id.value)
        return TemporaryPassword(principal=principal, password=temporary)

    async def reset_password(
        self,
        principal_id: PrincipalId,
        scope: Scope,
        request: RequestContext | None = None,
    ) -> TemporaryPassword:
        """Administrative password reset.

        Requires manage_users on the target's tenant. All of the target's
        sessions are revoked afterwards.

        Raises:
            PrincipalNotFoundError: If the principal does not exist
            UnauthorizedError: If the caller may not manage the principal
        """
        try:
            async with self._session.begin():
                principal = await self._principals.get_by_id(principal_id)
                if principal is None:
                    raise PrincipalNotFoundError(
                        f"Principal {principal_id.value} not found"
                    )
                await self._guard.require(
                    scope,
                    Action.MANAGE_USERS,
                    principal.tenant_value,
                    request,
                )
                result = await self.reset_to_temporary(principal)
                events = principal.collect_events()
        except Exception as e:
            self._probe.password_reset_failed(principal_id.value, str(e))
            raise

        await record_events(self._audit, scope, events, request)
        await self._sessions.revoke_all(
            principal.id,
            actor=scope,
            tenant_id=principal.tenant_value,
            request=request,
        )
        return result

    async def change_password(
        self,
        principal_id: PrincipalId,
        current_password: str,
        new_password: str,
        current_token: str | None,
        request: RequestContext | None = None,
    ) -> int:
        """Change a principal's own password.

        Every other session of the principal is revoked; the session that
        made the change stays signed in.

        Returns:
            Number of other sessions revoked

        Raises:
            ValidationFailedError: If the new password violates the policy
            InvalidCredentialsError: If the current password is wrong
            PrincipalNotFoundError: If the principal does not exist
        """
        try:
            result = validate_password(new_password, self._min_password_length)
            if isinstance(result, Invalid):
                raise ValidationFailedError(result.errors)

            async with self._session.begin():
                principal = await self._principals.get_by_id(principal_id)
                if principal is None:
                    raise PrincipalNotFoundError(
                        f"Principal {principal_id.value} not found"
                    )
                principal.ensure_active()
                if not verify_password(
                    current_password, principal.password_hash, self._bcrypt_rounds
                ):
                    raise InvalidCredentialsError()

                principal.change_password(
                    hash_password(new_password, rounds=self._bcrypt_rounds),
                    self._clock(),
                )
                await self._principals.save(principal)
                events = principal.collect_events()
        except Exception as e:
            self._probe.password_change_failed(principal_id.value, str(e))
            raise

        scope = principal.to_scope()
        await record_events(self._audit, scope, events, request)
        revoked = await self._sessions.revoke_all_except(
            principal.id, current_token, actor=scope, request=request
        )
        self._probe.password_changed(principal.id.value, revoked)
        return revoked

    async def request_email_change(
        self,
        principal_id: PrincipalId,
        new_email: str,
        current_password: str,
        url_builder: Callable[[str], str],
        request: RequestContext | None = None,
    ) -> None:
        """Mail a confirmation link to a new e-mail address.

        The address only changes once the link is followed, so a typo can
        never lock the principal out.

        Raises:
            ValidationFailedError: If the address is invalid or unchanged
            InvalidCredentialsError: If the current password is wrong
            DuplicateEmailError: If another principal uses the address
            PrincipalNotFoundError: If the principal does not exist
        """
        new_email = normalize_email(new_email)
        try:
            result = validate_email(new_email)
            if isinstance(result, Invalid):
                raise ValidationFailedError(result.errors)

            async with self._session.begin():
                principal = await self._principals.get_by_id(principal_id)
                if principal is None:
                    raise PrincipalNotFoundError(
                        f"Principal {principal_id.value} not found"
                    )
                principal.ensure_active()
                if not verify_password(
                    current_password, principal.password_hash, self._bcrypt_rounds
                ):
                    raise InvalidCredentialsError()
                if new_email == principal.email:
                    raise ValidationFailedError({"email": ["did not change"]})
                if await self._principals.get_by_email(new_email) is not None:
                    raise DuplicateEmailError(f"{new_email} is already registered")
        except Exception as e:
            self._probe.email_change_failed(principal_id.value, str(e))
            raise

        token = await self._sessions.issue_email_token(
            principal, TokenContext.EMAIL_CHANGE, sent_to=new_email
        )
        await self._email_changes.deliver_email_change_instructions(
            new_email, url_builder(token)
        )
        await self._audit.record(
            principal.to_scope(),
            EMAIL_CHANGE_REQUESTED,
            tenant_id=principal.tenant_value,
            resource_type="principal",
            resource_id=principal.id.value,
            changes={"new_email": new_email},
            request=request,
        )
        self._probe.email_change_requested(principal.id.value)

    async def confirm_email_change(
        self,
        principal_id: PrincipalId,
        token: str,
        request: RequestContext | None = None,
    ) -> Principal:
        """Switch to the address a confirmation link was mailed to.

        The token must have been issued to the signed-in principal. Any
        other outstanding change links for the principal are discarded.

        Raises:
            SessionNotFoundError: Unknown, used or foreign token
            SessionExpiredError: The link is older than its validity
            DuplicateEmailError: If the address was taken in the meantime
        """
        try:
            owner, new_email = await self._sessions.consume_email_change_token(token)
            if owner.id != principal_id:
                raise SessionNotFoundError("Token not found")

            async with self._session.begin():
                principal = await self._principals.get_by_id(principal_id)
                if principal is None:
                    raise PrincipalNotFoundError(
                        f"Principal {principal_id.value} not found"
                    )
                if await self._principals.get_by_email(new_email) is not None:
                    raise DuplicateEmailError(f"{new_email} is already registered")
                principal.change_email(new_email, self._clock())
                await self._principals.save(principal)
                events = principal.collect_events()
        except Exception as e:
            self._probe.email_change_failed(principal_id.value, str(e))
            raise

        await self._sessions.discard_mailed_tokens(
            principal.id, TokenContext.EMAIL_CHANGE
        )
        await record_events(self._audit, principal.to_scope(), events, request)
        self._probe.email_changed(principal.id.value)
        return principal
