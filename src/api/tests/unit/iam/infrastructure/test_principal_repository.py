"""Unit tests for PrincipalRepository with a mocked session."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from iam.domain.aggregates import Principal
from iam.domain.value_objects import PrincipalId, PrincipalStatus, TenantId
from iam.infrastructure.models import PrincipalModel
from iam.infrastructure.principal_repository import PrincipalRepository
from iam.ports.exceptions import DuplicateEmailError
from iam.ports.repositories import IPrincipalRepository
from shared_kernel.authorization.types import Role


@pytest.fixture
def mock_session():
    return AsyncMock()


@pytest.fixture
def repository(mock_session):
    return PrincipalRepository(session=mock_session)


def _result(model):
    result = MagicMock()
    result.scalar_one_or_none.return_value = model
    return result


def _principal(email="jo@acme.test"):
    return Principal.create(
        email=email,
        role=Role.OPERATOR,
        tenant_id=TenantId.generate(),
        password_hash="$2b$04$hash",
    )


def _model(principal_id=None, email="jo@acme.test"):
    return PrincipalModel(
        id=principal_id or PrincipalId.generate().value,
        email=email,
        password_hash="$2b$04$hash",
        role="viewer",
        tenant_id=TenantId.generate().value,
        status="inactive",
        must_change_password=True,
        display_name="Jo",
        last_login_at=None,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )


def test_implements_protocol(repository):
    assert isinstance(repository, IPrincipalRepository)


class TestSave:
    @pytest.mark.asyncio
    async def test_adds_new_principal(self, repository, mock_session):
        principal = _principal()
        mock_session.execute.return_value = _result(None)

        await repository.save(principal)

        mock_session.add.assert_called_once()
        added = mock_session.add.call_args[0][0]
        assert isinstance(added, PrincipalModel)
        assert added.id == principal.id.value
        assert added.email == "jo@acme.test"
        assert added.role == "operator"
        assert added.tenant_id == principal.tenant_value
        mock_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_email_of_another_principal(self, repository, mock_session):
        mock_session.execute.return_value = _result(_model())

        with pytest.raises(DuplicateEmailError):
            await repository.save(_principal())

        mock_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_unique_violation_during_flush(self, repository, mock_session):
        mock_session.execute.return_value = _result(None)
        mock_session.flush.side_effect = IntegrityError(
            "INSERT INTO principals ...",
            {},
            Exception(
                'duplicate key value violates unique constraint "uq_principals_email"'
            ),
        )

        with pytest.raises(DuplicateEmailError):
            await repository.save(_principal())

    @pytest.mark.asyncio
    async def test_other_integrity_errors_propagate(self, repository, mock_session):
        mock_session.execute.return_value = _result(None)
        mock_session.flush.side_effect = IntegrityError(
            "INSERT INTO principals ...",
            {},
            Exception('violates check constraint "ck_principals_root_admin_tenant"'),
        )

        with pytest.raises(IntegrityError):
            await repository.save(_principal())


class TestGet:
    @pytest.mark.asyncio
    async def test_maps_row_to_aggregate(self, repository, mock_session):
        model = _model()
        mock_session.execute.return_value = _result(model)

        principal = await repository.get_by_id(PrincipalId(value=model.id))

        assert principal.id.value == model.id
        assert principal.role == Role.VIEWER
        assert principal.status == PrincipalStatus.INACTIVE
        assert principal.tenant_id == TenantId(value=model.tenant_id)
        assert principal.must_change_password is True
        assert principal.display_name == "Jo"

    @pytest.mark.asyncio
    async def test_missing(self, repository, mock_session):
        mock_session.execute.return_value = _result(None)

        assert await repository.get_by_email("ghost@acme.test") is None


class TestDelete:
    @pytest.mark.asyncio
    async def test_deletes_existing_row(self, repository, mock_session):
        principal = _principal()
        model = _model(principal.id.value)
        mock_session.execute.return_value = _result(model)

        assert await repository.delete(principal) is True
        mock_session.delete.assert_awaited_once_with(model)

    @pytest.mark.asyncio
    async def test_missing_row(self, repository, mock_session):
        mock_session.execute.return_value = _result(None)

        assert await repository.delete(_principal()) is False
        mock_session.delete.assert_not_called()
