"""Pure input validation for IAM aggregates.

Each validator returns ``Valid`` or ``Invalid`` carrying field -> reasons,
so callers can collect every problem at once instead of failing on the
first one. No I/O happens here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from shared_kernel.authorization.types import Role

EMAIL_PATTERN = re.compile(r"^[^@,;\s]+@[^@,;\s]+$")
SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

EMAIL_MAX_LENGTH = 160
NAME_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 20
PASSWORD_MAX_BYTES = 72  # bcrypt ignores anything beyond this

INVITABLE_ROLES = frozenset({Role.OPERATOR, Role.VIEWER})

DEFAULT_TENANT_SETTINGS: dict[str, Any] = {
    "default_unit": "kg",
    "timezone": "UTC",
    "date_format": "YYYY-MM-DD",
}


@dataclass(frozen=True)
class Valid:
    """Validation passed."""

    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Invalid:
    """Validation failed.

    Attributes:
        errors: Mapping of field name to the reasons it was rejected
    """

    errors: dict[str, list[str]]
    ok: bool = field(default=False, init=False)


ValidationResult = Valid | Invalid


class _Errors:
    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add(self, field_name: str, reason: str) -> None:
        self._errors.setdefault(field_name, []).append(reason)

    def result(self) -> ValidationResult:
        if self._errors:
            return Invalid(errors=self._errors)
        return Valid()


def normalize_email(email: str) -> str:
    """Canonical form used for storage and comparison."""
    return email.strip().lower()


def _check_email(errors: _Errors, email: str | None, field_name: str = "email") -> None:
    if not email:
        errors.add(field_name, "can't be blank")
        return
    if not EMAIL_PATTERN.match(email):
        errors.add(field_name, "must have the @ sign and no spaces")
    if len(email) > EMAIL_MAX_LENGTH:
        errors.add(field_name, f"should be at most {EMAIL_MAX_LENGTH} character(s)")


def _check_role(errors: _Errors, role: str | None) -> Role | None:
    if not role:
        errors.add("role", "can't be blank")
        return None
    try:
        return Role.parse(role)
    except ValueError:
        errors.add("role", "is invalid")
        return None


def validate_email(email: str | None) -> ValidationResult:
    """Check a single e-mail address, e.g. the target of an e-mail change."""
    errors = _Errors()
    _check_email(errors, email)
    return errors.result()


def validate_password(password: str | None, min_length: int) -> ValidationResult:
    """Check a new password against the length policy."""
    errors = _Errors()
    if not password:
        errors.add("password", "can't be blank")
        return errors.result()
    if len(password) < min_length:
        errors.add("password", f"should be at least {min_length} character(s)")
    if len(password.encode()) > PASSWORD_MAX_BYTES:
        errors.add("password", f"should be at most {PASSWORD_MAX_BYTES} byte(s)")
    return errors.result()


def validate_principal(
    email: str | None,
    role: str | None,
    tenant_id: str | None,
    display_name: str | None = None,
) -> ValidationResult:
    """Validate attributes for a new principal.

    Enforces that root admins have no tenant and every other role has one.
    """
    errors = _Errors()
    _check_email(errors, email)
    parsed = _check_role(errors, role)

    if parsed == Role.ROOT_ADMIN and tenant_id is not None:
        errors.add("tenant_id", "must be empty for root admins")
    elif parsed is not None and parsed != Role.ROOT_ADMIN and tenant_id is None:
        errors.add("tenant_id", "can't be blank")

    if display_name is not None and len(display_name) > NAME_MAX_LENGTH:
        errors.add("display_name", f"should be at most {NAME_MAX_LENGTH} character(s)")
    return errors.result()


def validate_invitation(email: str | None, role: str | None) -> ValidationResult:
    """Validate attributes for a new invitation.

    Invitations may only grant non-admin roles.
    """
    errors = _Errors()
    _check_email(errors, email)
    parsed = _check_role(errors, role)
    if parsed is not None and parsed not in INVITABLE_ROLES:
        errors.add("role", "must be operator or viewer")
    return errors.result()


def validate_tenant(
    name: str | None,
    slug: str | None,
    contact_email: str | None = None,
    contact_phone: str | None = None,
) -> ValidationResult:
    """Validate attributes for a new tenant."""
    errors = _Errors()
    if not name:
        errors.add("name", "can't be blank")
    elif len(name) > NAME_MAX_LENGTH:
        errors.add("name", f"should be at most {NAME_MAX_LENGTH} character(s)")

    if not slug:
        errors.add("slug", "can't be blank")
    else:
        if not SLUG_PATTERN.match(slug):
            errors.add(
                "slug", "must contain only lowercase letters, numbers, and hyphens"
            )
        if len(slug) > NAME_MAX_LENGTH:
            errors.add("slug", f"should be at most {NAME_MAX_LENGTH} character(s)")

    if contact_email:
        _check_email(errors, contact_email, field_name="contact_email")
    if contact_phone and len(contact_phone) > PHONE_MAX_LENGTH:
        errors.add(
            "contact_phone", f"should be at most {PHONE_MAX_LENGTH} character(s)"
        )
    return errors.result()


def validate_tenant_settings(settings: dict[str, Any]) -> ValidationResult:
    """Only known setting keys with string values are accepted."""
    errors = _Errors()
    for key, value in settings.items():
        if key not in DEFAULT_TENANT_SETTINGS:
            errors.add(key, "is not a known setting")
        elif not isinstance(value, str) or not value:
            errors.add(key, "must be a non-empty string")
    return errors.result()
