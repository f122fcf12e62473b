"""Unit tests for pure input validation."""

import pytest

from iam.domain.validation import (
    Invalid,
    Valid,
    normalize_email,
    validate_invitation,
    validate_password,
    validate_principal,
    validate_tenant_settings,
)


class TestEmail:
    def test_normalize_email(self):
        assert normalize_email("  Jo@Acme.Test ") == "jo@acme.test"

    @pytest.mark.parametrize(
        "email", ["jo", "jo@", "jo acme@x.test", "a@b@c.test", "a,b@c.test"]
    )
    def test_rejects_malformed_email(self, email):
        result = validate_principal(email, "viewer", "tenant")

        assert isinstance(result, Invalid)
        assert "email" in result.errors

    def test_rejects_overlong_email(self):
        result = validate_principal("a" * 160 + "@x.test", "viewer", "tenant")

        assert isinstance(result, Invalid)
        assert result.errors["email"] == ["should be at most 160 character(s)"]


class TestPassword:
    def test_accepts_password_at_minimum_length(self):
        assert isinstance(validate_password("x" * 12, 12), Valid)

    def test_rejects_short_password(self):
        result = validate_password("short", 12)

        assert isinstance(result, Invalid)
        assert result.errors["password"] == ["should be at least 12 character(s)"]

    def test_rejects_password_beyond_bcrypt_limit(self):
        result = validate_password("é" * 40, 12)

        assert isinstance(result, Invalid)
        assert result.errors["password"] == ["should be at most 72 byte(s)"]

    def test_rejects_blank_password(self):
        assert isinstance(validate_password("", 12), Invalid)


class TestPrincipal:
    def test_unknown_role(self):
        result = validate_principal("jo@acme.test", "owner", "tenant")

        assert isinstance(result, Invalid)
        assert result.errors == {"role": ["is invalid"]}

    def test_valid_root_admin(self):
        assert isinstance(validate_principal("root@x.test", "root_admin", None), Valid)


class TestInvitation:
    def test_collects_every_error(self):
        result = validate_invitation("", "tenant_admin")

        assert isinstance(result, Invalid)
        assert set(result.errors) == {"email", "role"}


class TestTenantSettings:
    def test_known_keys_are_valid(self):
        assert isinstance(validate_tenant_settings({"default_unit": "lb"}), Valid)

    def test_non_string_value_is_invalid(self):
        result = validate_tenant_settings({"timezone": 3})

        assert isinstance(result, Invalid)
