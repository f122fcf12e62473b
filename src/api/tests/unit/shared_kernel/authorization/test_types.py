"""Unit tests for authorization types."""

import pytest

from shared_kernel.authorization.types import Role, Scope


class TestRole:
    def test_parse_known_role(self):
        assert Role.parse("operator") is Role.OPERATOR

    def test_parse_unknown_role_raises(self):
        with pytest.raises(ValueError, match="Invalid role"):
            Role.parse("superuser")

    @pytest.mark.parametrize(
        "role,expected",
        [
            (Role.ROOT_ADMIN, True),
            (Role.TENANT_ADMIN, True),
            (Role.OPERATOR, False),
            (Role.VIEWER, False),
        ],
    )
    def test_is_admin(self, role, expected):
        assert role.is_admin is expected


class TestScope:
    def test_scope_is_immutable(self):
        scope = Scope(
            principal_id="p", email="a@b.test", role=Role.VIEWER, tenant_id="t"
        )
        with pytest.raises(AttributeError):
            scope.role = Role.ROOT_ADMIN  # type: ignore[misc]

    def test_is_root_admin(self):
        root = Scope(
            principal_id="p", email="a@b.test", role=Role.ROOT_ADMIN, tenant_id=None
        )
        assert root.is_root_admin
