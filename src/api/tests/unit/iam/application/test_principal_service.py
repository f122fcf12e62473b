"""Unit tests for PrincipalService."""

import asyncio

import pytest

from iam.application.security import verify_password
from iam.domain.value_objects import PrincipalId, PrincipalStatus
from iam.ports.exceptions import (
    CannotModifySelfError,
    DuplicateEmailError,
    PrincipalNotFoundError,
    ValidationFailedError,
)
from shared_kernel.authorization.exceptions import UnauthorizedError
from shared_kernel.authorization.types import Role
from tests.unit.fakes import TEST_PASSWORD, make_principal


class TestCreatePrincipal:
    @pytest.mark.asyncio
    async def test_generates_temporary_password(
        self, principal_service, audit, tenant, tenant_admin
    ):
        principal, temporary = await principal_service.create_principal(
            tenant_admin.to_scope(), "Picker@Acme.test", "operator", tenant.id
        )

        assert principal.email == "picker@acme.test"
        assert principal.must_change_password is True
        assert verify_password(temporary, principal.password_hash)
        [entry] = audit.entries
        assert entry.action == "principal.created"
        assert entry.changes == {"email": "picker@acme.test", "role": "operator"}
        assert temporary not in repr(entry.changes)

    @pytest.mark.asyncio
    async def test_chosen_password(self, principal_service, tenant, tenant_admin):
        principal, temporary = await principal_service.create_principal(
            tenant_admin.to_scope(),
            "picker@acme.test",
            "viewer",
            tenant.id,
            password=TEST_PASSWORD,
        )

        assert temporary is None
        assert principal.must_change_password is False

    @pytest.mark.asyncio
    async def test_tenant_admin_cannot_grant_admin(
        self, principal_service, principal_repo, audit, tenant, tenant_admin
    ):
        with pytest.raises(UnauthorizedError):
            await principal_service.create_principal(
                tenant_admin.to_scope(), "boss@acme.test", "tenant_admin", tenant.id
            )

        assert await principal_repo.get_by_email("boss@acme.test") is None
        [entry] = audit.entries
        assert entry.action == "authorization.denied"
        assert entry.changes["attempted_role"] == "tenant_admin"
        assert entry.changes["required_roles"] == ["root_admin"]

    @pytest.mark.asyncio
    async def test_root_admin_creates_tenant_admin(
        self, principal_service, tenant, root_admin
    ):
        principal, _ = await principal_service.create_principal(
            root_admin.to_scope(), "boss@acme.test", "tenant_admin", tenant.id
        )

        assert principal.role == Role.TENANT_ADMIN
        assert principal.tenant_id == tenant.id

    @pytest.mark.asyncio
    async def test_root_admin_must_not_have_tenant(
        self, principal_service, tenant, root_admin
    ):
        with pytest.raises(ValidationFailedError):
            await principal_service.create_principal(
                root_admin.to_scope(), "second@stockyard.test", "root_admin", tenant.id
            )

    @pytest.mark.asyncio
    async def test_cross_tenant_creation_is_denied(
        self, principal_service, other_tenant, tenant_admin
    ):
        with pytest.raises(UnauthorizedError):
            await principal_service.create_principal(
                tenant_admin.to_scope(), "spy@globex.test", "viewer", other_tenant.id
            )

    @pytest.mark.asyncio
    async def test_duplicate_email(
        self, principal_service, tenant, tenant_admin, viewer
    ):
        with pytest.raises(DuplicateEmailError):
            await principal_service.create_principal(
                tenant_admin.to_scope(), viewer.email.upper(), "viewer", tenant.id
            )

    @pytest.mark.asyncio
    async def test_concurrent_creation_yields_one_principal(
        self, principal_service, principal_repo, tenant, tenant_admin
    ):
        scope = tenant_admin.to_scope()

        results = await asyncio.gather(
            principal_service.create_principal(
                scope, "twin@acme.test", "viewer", tenant.id
            ),
            principal_service.create_principal(
                scope, "Twin@ACME.test", "operator", tenant.id
            ),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], DuplicateEmailError)
        stored = [
            p for p in principal_repo.principals.values() if p.email == "twin@acme.test"
        ]
        assert len(stored) == 1


class TestRead:
    @pytest.mark.asyncio
    async def test_other_tenant_principal_looks_missing(
        self, principal_service, tenant_admin, other_admin
    ):
        with pytest.raises(PrincipalNotFoundError):
            await principal_service.get_principal(
                tenant_admin.to_scope(), other_admin.id
            )

    @pytest.mark.asyncio
    async def test_list_is_pinned_to_own_tenant(
        self,
        principal_service,
        tenant_admin,
        operator,
        viewer,
        other_tenant,
        other_admin,
    ):
        principals = await principal_service.list_principals(
            tenant_admin.to_scope(), other_tenant.id
        )

        assert [p.email for p in principals] == [
            "admin@acme.test",
            "operator@acme.test",
            "viewer@acme.test",
        ]

    @pytest.mark.asyncio
    async def test_root_admin_lists_everyone(
        self, principal_service, root_admin, tenant_admin, other_admin
    ):
        principals = await principal_service.list_principals(root_admin.to_scope())

        assert {p.email for p in principals} == {
            "root@stockyard.test",
            "admin@acme.test",
            "admin@globex.test",
        }

    @pytest.mark.asyncio
    async def test_viewer_cannot_list(self, principal_service, viewer):
        with pytest.raises(UnauthorizedError):
            await principal_service.list_principals(viewer.to_scope())


class TestChangeRole:
    @pytest.mark.asyncio
    async def test_records_before_and_after(
        self, principal_service, audit, tenant_admin, operator
    ):
        principal = await principal_service.change_role(
            tenant_admin.to_scope(), operator.id, "viewer"
        )

        assert principal.role == Role.VIEWER
        [entry] = audit.entries
        assert entry.action == "principal.role_changed"
        assert entry.changes == {
            "before": {"role": "operator"},
            "after": {"role": "viewer"},
        }

    @pytest.mark.asyncio
    async def test_tenant_admin_cannot_promote_to_admin(
        self, principal_service, tenant_admin, operator
    ):
        with pytest.raises(UnauthorizedError):
            await principal_service.change_role(
                tenant_admin.to_scope(), operator.id, "tenant_admin"
            )

        assert operator.role == Role.OPERATOR

    @pytest.mark.asyncio
    async def test_tenant_admin_cannot_demote_another_admin(
        self, principal_service, principal_repo, tenant, tenant_admin
    ):
        peer = principal_repo.add(
            make_principal("peer@acme.test", Role.TENANT_ADMIN, tenant)
        )

        with pytest.raises(UnauthorizedError):
            await principal_service.change_role(
                tenant_admin.to_scope(), peer.id, "viewer"
            )

    @pytest.mark.asyncio
    async def test_cannot_change_own_role(self, principal_service, root_admin):
        with pytest.raises(CannotModifySelfError):
            await principal_service.change_role(
                root_admin.to_scope(), root_admin.id, "root_admin"
            )

    @pytest.mark.asyncio
    async def test_unknown_role(self, principal_service, tenant_admin, operator):
        with pytest.raises(ValidationFailedError):
            await principal_service.change_role(
                tenant_admin.to_scope(), operator.id, "overlord"
            )

    @pytest.mark.asyncio
    async def test_unknown_principal(self, principal_service, root_admin):
        with pytest.raises(PrincipalNotFoundError):
            await principal_service.change_role(
                root_admin.to_scope(), PrincipalId.generate(), "viewer"
            )


class TestDeactivation:
    @pytest.mark.asyncio
    async def test_deactivate_ends_sessions(
        self,
        principal_service,
        session_service,
        token_repo,
        audit,
        tenant_admin,
        operator,
    ):
        await session_service.issue(operator)

        principal = await principal_service.deactivate(
            tenant_admin.to_scope(), operator.id
        )

        assert principal.status == PrincipalStatus.INACTIVE
        assert token_repo.for_principal(operator.id) == []
        assert audit.actions == ["principal.deactivated", "session.invalidated_all"]

    @pytest.mark.asyncio
    async def test_activate_again(
        self, principal_service, audit, tenant_admin, operator
    ):
        await principal_service.deactivate(tenant_admin.to_scope(), operator.id)

        principal = await principal_service.activate(
            tenant_admin.to_scope(), operator.id
        )

        assert principal.is_active
        assert audit.actions[-1] == "principal.activated"

    @pytest.mark.asyncio
    async def test_cannot_deactivate_self(self, principal_service, root_admin):
        with pytest.raises(CannotModifySelfError):
            await principal_service.deactivate(root_admin.to_scope(), root_admin.id)

        assert root_admin.is_active


class TestDelete:
    @pytest.mark.asyncio
    async def test_removes_principal_and_sessions(
        self,
        principal_service,
        session_service,
        principal_repo,
        token_repo,
        audit,
        tenant_admin,
        operator,
    ):
        await session_service.issue(operator)

        await principal_service.delete(tenant_admin.to_scope(), operator.id)

        assert await principal_repo.get_by_id(operator.id) is None
        assert token_repo.tokens == {}
        assert audit.actions == ["session.invalidated_all", "principal.deleted"]
        assert audit.entries[-1].changes == {"email": operator.email}

    @pytest.mark.asyncio
    async def test_cannot_delete_self(
        self, principal_service, principal_repo, root_admin
    ):
        with pytest.raises(CannotModifySelfError):
            await principal_service.delete(root_admin.to_scope(), root_admin.id)

        assert await principal_repo.get_by_id(root_admin.id) is root_admin

    @pytest.mark.asyncio
    async def test_cross_tenant_delete_is_denied(
        self, principal_service, principal_repo, other_admin, viewer
    ):
        with pytest.raises(UnauthorizedError):
            await principal_service.delete(other_admin.to_scope(), viewer.id)

        assert await principal_repo.get_by_id(viewer.id) is viewer
