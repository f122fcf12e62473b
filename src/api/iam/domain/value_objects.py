"""Value objects for IAM domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Self

from ulid import ULID


@dataclass(frozen=True)
class _UlidIdentifier:
    """Base for ULID-backed aggregate identifiers.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> Self:
        """Generate a new identifier using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create an identifier from string value.

        Args:
            value: ULID string

        Returns:
            Identifier instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid {cls.__name__}: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class PrincipalId(_UlidIdentifier):
    """Identifier for a Principal aggregate."""


@dataclass(frozen=True)
class TenantId(_UlidIdentifier):
    """Identifier for a Tenant aggregate."""


@dataclass(frozen=True)
class InvitationId(_UlidIdentifier):
    """Identifier for an Invitation aggregate."""


@dataclass(frozen=True)
class SessionTokenId(_UlidIdentifier):
    """Identifier for a stored session token."""


class PrincipalStatus(StrEnum):
    """Whether a principal may sign in."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class TokenContext(StrEnum):
    """Purpose a stored token was issued for.

    Lookups always filter on context so a token issued for one purpose
    can never be replayed for another.
    """

    SESSION = "session"
    PASSWORD_RESET = "password_reset"
    EMAIL_CHANGE = "email_change"
    MAGIC_LINK = "magic_link"


# Contexts whose tokens are delivered by e-mail rather than a cookie
MAILED_CONTEXTS = frozenset(
    {TokenContext.PASSWORD_RESET, TokenContext.EMAIL_CHANGE, TokenContext.MAGIC_LINK}
)


class InvitationStatus(StrEnum):
    """Invitation lifecycle states.

    Transitions are forward only: pending -> accepted or pending -> expired.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not InvitationStatus.PENDING
