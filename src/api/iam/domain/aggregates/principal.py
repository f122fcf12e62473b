"""Principal aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from iam.domain.events import (
    PasswordChanged,
    PasswordReset,
    PrincipalActivated,
    PrincipalCreated,
    PrincipalDeactivated,
    PrincipalDeleted,
    PrincipalEmailChanged,
    PrincipalRoleChanged,
)
from iam.domain.validation import (
    Invalid,
    normalize_email,
    validate_email,
    validate_principal,
)
from iam.domain.value_objects import PrincipalId, PrincipalStatus, TenantId
from iam.ports.exceptions import PrincipalInactiveError, ValidationFailedError
from shared_kernel.authorization.types import Role, Scope

if TYPE_CHECKING:
    from iam.domain.events import DomainEvent


@dataclass
class Principal:
    """Principal aggregate representing an account that can sign in.

    Business rules:
    - E-mail is unique across the system and stored lower-cased
    - A root admin has no tenant; every other role belongs to exactly one
    - Inactive principals cannot hold sessions
    - password_hash is None until a password is set (e.g. invited accounts)

    Event collection:
    - All mutating operations record domain events
    - Events can be collected via collect_events() for audit recording
    """

    id: PrincipalId
    email: str
    role: Role
    tenant_id: TenantId | None
    password_hash: str | None = None
    status: PrincipalStatus = PrincipalStatus.ACTIVE
    must_change_password: bool = False
    display_name: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    _pending_events: list[DomainEvent] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if (self.role == Role.ROOT_ADMIN) != (self.tenant_id is None):
            raise ValidationFailedError(
                {"tenant_id": ["must be empty exactly when the role is root_admin"]}
            )

    @classmethod
    def create(
        cls,
        email: str,
        role: Role,
        tenant_id: TenantId | None,
        password_hash: str | None = None,
        display_name: str | None = None,
        must_change_password: bool = False,
        now: datetime | None = None,
    ) -> Principal:
        """Factory method for creating a new principal.

        Args:
            email: E-mail address (normalized before storage)
            role: Role to assign
            tenant_id: Owning tenant, None only for root admins
            password_hash: bcrypt hash of the initial password, if any
            display_name: Optional human readable name
            must_change_password: Force a password change on next sign in
            now: Creation instant (defaults to current UTC time)

        Returns:
            A new Principal with PrincipalCreated recorded

        Raises:
            ValidationFailedError: If any attribute is invalid
        """
        email = normalize_email(email)
        result = validate_principal(
            email,
            role.value,
            tenant_id.value if tenant_id else None,
            display_name,
        )
        if isinstance(result, Invalid):
            raise ValidationFailedError(result.errors)

        now = now or datetime.now(UTC)
        principal = cls(
            id=PrincipalId.generate(),
            email=email,
            role=role,
            tenant_id=tenant_id,
            password_hash=password_hash,
            must_change_password=must_change_password,
            display_name=display_name,
            created_at=now,
        )
        principal._pending_events.append(
            PrincipalCreated(
                principal_id=principal.id.value,
                email=email,
                role=role.value,
                tenant_id=principal.tenant_value,
                occurred_at=now,
            )
        )
        return principal

    @property
    def tenant_value(self) -> str | None:
        return self.tenant_id.value if self.tenant_id else None

    @property
    def is_active(self) -> bool:
        return self.status == PrincipalStatus.ACTIVE

    def to_scope(self) -> Scope:
        """Snapshot of this principal for authorization decisions."""
        return Scope(
            principal_id=self.id.value,
            email=self.email,
            role=self.role,
            tenant_id=self.tenant_value,
        )

    def ensure_active(self) -> None:
        """Raise PrincipalInactiveError unless the principal may sign in."""
        if not self.is_active:
            raise PrincipalInactiveError(f"Principal {self.id.value} is inactive")

    def change_role(self, new_role: Role, now: datetime | None = None) -> None:
        """Assign a new role within the same tenant.

        Moving between root admin and a tenant role would break the tenant
        invariant, so it is rejected.

        Raises:
            ValidationFailedError: If the new role does not fit the tenant binding
        """
        if new_role == self.role:
            return
        if (new_role == Role.ROOT_ADMIN) != (self.tenant_id is None):
            raise ValidationFailedError(
                {"role": ["cannot move a principal in or out of root_admin"]}
            )

        old_role = self.role
        self.role = new_role
        self._pending_events.append(
            PrincipalRoleChanged(
                principal_id=self.id.value,
                tenant_id=self.tenant_value,
                old_role=old_role.value,
                new_role=new_role.value,
                occurred_at=now or datetime.now(UTC),
            )
        )

    def deactivate(self, now: datetime | None = None) -> None:
        """Prevent the principal from signing in."""
        if not self.is_active:
            return
        self.status = PrincipalStatus.INACTIVE
        self._pending_events.append(
            PrincipalDeactivated(
                principal_id=self.id.value,
                tenant_id=self.tenant_value,
                occurred_at=now or datetime.now(UTC),
            )
        )

    def activate(self, now: datetime | None = None) -> None:
        """Allow a deactivated principal to sign in again."""
        if self.is_active:
            return
        self.status = PrincipalStatus.ACTIVE
        self._pending_events.append(
            PrincipalActivated(
                principal_id=self.id.value,
                tenant_id=self.tenant_value,
                occurred_at=now or datetime.now(UTC),
            )
        )

    def change_email(self, new_email: str, now: datetime | None = None) -> None:
        """Switch to a confirmed new e-mail address.

        Raises:
            ValidationFailedError: If the address is invalid or unchanged
        """
        new_email = normalize_email(new_email)
        result = validate_email(new_email)
        if isinstance(result, Invalid):
            raise ValidationFailedError(result.errors)
        if new_email == self.email:
            raise ValidationFailedError({"email": ["did not change"]})

        old_email = self.email
        self.email = new_email
        self._pending_events.append(
            PrincipalEmailChanged(
                principal_id=self.id.value,
                tenant_id=self.tenant_value,
                old_email=old_email,
                new_email=new_email,
                occurred_at=now or datetime.now(UTC),
            )
        )

    def change_password(self, password_hash: str, now: datetime | None = None) -> None:
        """Set a password chosen by the principal and clear the forced-change flag."""
        self.password_hash = password_hash
        self.must_change_password = False
        self._pending_events.append(
            PasswordChanged(
                principal_id=self.id.value,
                tenant_id=self.tenant_value,
                occurred_at=now or datetime.now(UTC),
            )
        )

    def reset_password(self, password_hash: str, now: datetime | None = None) -> None:
        """Replace the password with a temporary one that must be changed."""
        self.password_hash = password_hash
        self.must_change_password = True
        self._pending_events.append(
            PasswordReset(
                principal_id=self.id.value,
                tenant_id=self.tenant_value,
                occurred_at=now or datetime.now(UTC),
            )
        )

    def record_login(self, now: datetime | None = None) -> None:
        self.last_login_at = now or datetime.now(UTC)

    def mark_for_deletion(self, now: datetime | None = None) -> None:
        """Record the PrincipalDeleted event before the row is removed."""
        self._pending_events.append(
            PrincipalDeleted(
                principal_id=self.id.value,
                email=self.email,
                tenant_id=self.tenant_value,
                occurred_at=now or datetime.now(UTC),
            )
        )

    def collect_events(self) -> list[DomainEvent]:
        """Return and clear pending domain events.

        Returns:
            List of pending domain events
        """
        events = self._pending_events.copy()
        self._pending_events.clear()
        return events
