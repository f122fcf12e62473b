"""Exceptions for IAM bounded context.

Every error derives from IdentityError and carries a stable ``code``.
Services raise them; the presentation layer maps them to HTTP responses
without exposing internal details to unauthenticated callers.
"""

from __future__ import annotations

from shared_kernel.authorization.exceptions import UnauthorizedError
from shared_kernel.exceptions import IdentityError

__all__ = [
    "CannotModifySelfError",
    "DuplicateEmailError",
    "DuplicateTenantSlugError",
    "IdentityError",
    "InvalidCredentialsError",
    "InvitationAlreadyAcceptedError",
    "InvitationExpiredError",
    "InvitationNotFoundError",
    "PrincipalInactiveError",
    "PrincipalNotFoundError",
    "SessionExpiredError",
    "SessionNotFoundError",
    "TenantNotFoundError",
    "UnauthorizedError",
    "ValidationFailedError",
]


class InvalidCredentialsError(IdentityError):
    """Raised when an e-mail/password pair does not identify an active principal.

    The message never says which half was wrong.
    """

    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class SessionExpiredError(IdentityError):
    """Raised when a session token outlived the inactivity window."""

    code = "session_expired"


class SessionNotFoundError(IdentityError):
    """Raised when a session token is unknown, revoked, or its principal is inactive."""

    code = "session_not_found"


class InvitationNotFoundError(IdentityError):
    """Raised when an invitation token matches no invitation."""

    code = "invitation_not_found"


class InvitationExpiredError(IdentityError):
    """Raised when an invitation is redeemed after its expiry."""

    code = "invitation_expired"


class InvitationAlreadyAcceptedError(IdentityError):
    """Raised when an invitation that was already redeemed is redeemed again."""

    code = "invitation_already_accepted"


class DuplicateEmailError(IdentityError):
    """Raised when an e-mail address is already registered to a principal.

    Raised both by the friendly pre-check and when the storage unique
    constraint rejects a concurrent insert.
    """

    code = "duplicate_email"


class ValidationFailedError(IdentityError):
    """Raised when input fails validation.

    Attributes:
        errors: Mapping of field name to the reasons it was rejected
    """

    code = "validation_failed"

    def __init__(self, errors: dict[str, list[str]]) -> None:
        fields = ", ".join(sorted(errors))
        super().__init__(f"Validation failed for: {fields}")
        self.errors = errors


class PrincipalInactiveError(IdentityError):
    """Raised when an operation requires an active principal."""

    code = "principal_inactive"


class PrincipalNotFoundError(IdentityError):
    """Raised when a principal cannot be found (or is outside the caller's tenant)."""

    code = "principal_not_found"


class TenantNotFoundError(IdentityError):
    """Raised when a tenant cannot be found."""

    code = "tenant_not_found"


class DuplicateTenantSlugError(IdentityError):
    """Raised when a tenant slug is already taken."""

    code = "duplicate_tenant_slug"


class CannotModifySelfError(IdentityError):
    """Raised when an administrator tries to deactivate, delete or demote themselves."""

    code = "cannot_modify_self"
