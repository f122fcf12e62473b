"""Unit tests for RootAdminBootstrapService."""

import asyncio
from unittest.mock import Mock

import pytest

from iam.application.security import verify_password
from iam.application.services.root_admin_bootstrap_service import (
    RootAdminBootstrapService,
)
from iam.ports.exceptions import ValidationFailedError
from infrastructure.observability.startup_probe import StartupProbe
from shared_kernel.authorization.types import Role
from tests.unit.fakes import TEST_BCRYPT_ROUNDS

ROOT_EMAIL = "root@stockyard.test"
INITIAL_PASSWORD = "initial root password"


@pytest.fixture
def probe():
    return Mock(spec=StartupProbe)


@pytest.fixture
def bootstrap(principal_repo, db_session, probe):
    return RootAdminBootstrapService(
        principal_repository=principal_repo,
        session=db_session,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        probe=probe,
    )


class TestEnsureRootAdmin:
    @pytest.mark.asyncio
    async def test_creates_root_admin_on_empty_database(
        self, bootstrap, principal_repo, probe
    ):
        principal = await bootstrap.ensure_root_admin(ROOT_EMAIL, INITIAL_PASSWORD)

        assert principal.role == Role.ROOT_ADMIN
        assert principal.tenant_id is None
        assert principal.must_change_password is True
        assert verify_password(INITIAL_PASSWORD, principal.password_hash)
        assert await principal_repo.get_by_email(ROOT_EMAIL) is principal
        probe.root_admin_bootstrapped.assert_called_once_with(
            principal.id.value, ROOT_EMAIL
        )

    @pytest.mark.asyncio
    async def test_second_run_keeps_existing_account(
        self, bootstrap, principal_repo, probe
    ):
        first = await bootstrap.ensure_root_admin(ROOT_EMAIL, INITIAL_PASSWORD)

        second = await bootstrap.ensure_root_admin(ROOT_EMAIL, "another password!")

        assert second is first
        assert verify_password(INITIAL_PASSWORD, second.password_hash)
        assert len(principal_repo.principals) == 1
        probe.root_admin_already_exists.assert_called_once_with(
            first.id.value, ROOT_EMAIL
        )

    @pytest.mark.asyncio
    async def test_email_of_tenant_principal_is_refused(self, bootstrap, operator):
        with pytest.raises(ValidationFailedError):
            await bootstrap.ensure_root_admin(operator.email, INITIAL_PASSWORD)

        assert operator.role == Role.OPERATOR

    @pytest.mark.asyncio
    async def test_concurrent_instance_wins_the_race(
        self, bootstrap, principal_repo, probe
    ):
        results = await asyncio.gather(
            bootstrap.ensure_root_admin(ROOT_EMAIL, INITIAL_PASSWORD),
            bootstrap.ensure_root_admin(ROOT_EMAIL, INITIAL_PASSWORD),
        )

        assert results[0] is results[1]
        assert len(principal_repo.principals) == 1
        probe.root_admin_already_exists.assert_called_once()
