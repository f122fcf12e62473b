"""Unit tests for the Principal aggregate."""

from datetime import UTC, datetime

import pytest

from iam.domain.aggregates import Principal
from iam.domain.events import (
    PasswordReset,
    PrincipalCreated,
    PrincipalDeactivated,
    PrincipalEmailChanged,
    PrincipalRoleChanged,
)
from iam.domain.value_objects import PrincipalId, PrincipalStatus, TenantId
from iam.ports.exceptions import PrincipalInactiveError, ValidationFailedError
from shared_kernel.authorization.types import Role


def _create(email: str, role: Role, tenant_id: TenantId | None) -> Principal:
    return Principal.create(email=email, role=role, tenant_id=tenant_id)


class TestPrincipalCreation:
    def test_create_normalizes_email_and_records_event(self):
        tenant_id = TenantId.generate()

        principal = _create("  Jo@Acme.TEST ", Role.OPERATOR, tenant_id)

        assert principal.email == "jo@acme.test"
        [event] = principal.collect_events()
        assert isinstance(event, PrincipalCreated)
        assert event.tenant_id == tenant_id.value
        assert event.role == "operator"

    def test_root_admin_must_not_have_tenant(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            _create("root@x.test", Role.ROOT_ADMIN, TenantId.generate())

        assert "tenant_id" in exc_info.value.errors

    @pytest.mark.parametrize("role", [Role.TENANT_ADMIN, Role.OPERATOR, Role.VIEWER])
    def test_tenant_roles_require_tenant(self, role):
        with pytest.raises(ValidationFailedError) as exc_info:
            _create("someone@x.test", role, None)

        assert exc_info.value.errors["tenant_id"] == ["can't be blank"]

    def test_invalid_email_is_rejected(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            _create("not an email", Role.VIEWER, TenantId.generate())

        assert "email" in exc_info.value.errors

    def test_constructor_enforces_tenant_invariant(self):
        with pytest.raises(ValidationFailedError):
            Principal(
                id=PrincipalId.generate(),
                email="a@b.test",
                role=Role.VIEWER,
                tenant_id=None,
            )

    def test_to_scope_snapshots_identity(self):
        tenant_id = TenantId.generate()
        principal = _create("jo@acme.test", Role.VIEWER, tenant_id)

        scope = principal.to_scope()

        assert scope.principal_id == principal.id.value
        assert scope.role == Role.VIEWER
        assert scope.tenant_id == tenant_id.value


class TestPrincipalLifecycle:
    @pytest.fixture
    def principal(self):
        principal = _create("jo@acme.test", Role.VIEWER, TenantId.generate())
        principal.collect_events()
        return principal

    def test_change_role_records_before_and_after(self, principal):
        principal.change_role(Role.OPERATOR)

        [event] = principal.collect_events()
        assert isinstance(event, PrincipalRoleChanged)
        assert (event.old_role, event.new_role) == ("viewer", "operator")

    def test_same_role_is_a_noop(self, principal):
        principal.change_role(Role.VIEWER)

        assert principal.collect_events() == []

    def test_tenant_principal_cannot_become_root_admin(self, principal):
        with pytest.raises(ValidationFailedError):
            principal.change_role(Role.ROOT_ADMIN)

        assert principal.role == Role.VIEWER

    def test_deactivate_then_ensure_active_raises(self, principal):
        principal.deactivate()

        assert principal.status == PrincipalStatus.INACTIVE
        assert isinstance(principal.collect_events()[0], PrincipalDeactivated)
        with pytest.raises(PrincipalInactiveError):
            principal.ensure_active()

    def test_deactivate_twice_records_one_event(self, principal):
        principal.deactivate()
        principal.deactivate()

        assert len(principal.collect_events()) == 1

    def test_activate_restores_access(self, principal):
        principal.deactivate()
        principal.activate()

        assert principal.is_active
        principal.ensure_active()

    def test_reset_password_forces_change(self, principal):
        principal.reset_password("$2b$04$hash")

        assert principal.must_change_password is True
        assert isinstance(principal.collect_events()[0], PasswordReset)

    def test_change_password_clears_forced_change(self, principal):
        principal.reset_password("$2b$04$first")
        principal.change_password("$2b$04$second")

        assert principal.must_change_password is False
        assert principal.password_hash == "$2b$04$second"

    def test_record_login_stamps_time(self, principal):
        now = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)

        principal.record_login(now)

        assert principal.last_login_at == now
        assert principal.collect_events() == []


class TestPrincipalEmailChange:
    @pytest.fixture
    def principal(self):
        principal = _create("jo@acme.test", Role.OPERATOR, TenantId.generate())
        principal.collect_events()
        return principal

    def test_change_email_normalizes_and_records_event(self, principal):
        principal.change_email(" Joanna@ACME.test")

        assert principal.email == "joanna@acme.test"
        [event] = principal.collect_events()
        assert isinstance(event, PrincipalEmailChanged)
        assert (event.old_email, event.new_email) == (
            "jo@acme.test",
            "joanna@acme.test",
        )

    @pytest.mark.parametrize("new_email", ["jo@acme.test", "not an email"])
    def test_unchanged_or_invalid_email_is_rejected(self, principal, new_email):
        with pytest.raises(ValidationFailedError) as exc_info:
            principal.change_email(new_email)

        assert "email" in exc_info.value.errors
        assert principal.email == "jo@acme.test"
        assert principal.collect_events() == []
