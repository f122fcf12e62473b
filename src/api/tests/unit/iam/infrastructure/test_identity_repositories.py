"""Unit tests for the tenant, session token and invitation repositories."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from iam.domain.aggregates import Invitation, SessionToken, Tenant
from iam.domain.value_objects import (
    InvitationId,
    InvitationStatus,
    PrincipalId,
    SessionTokenId,
    TenantId,
    TokenContext,
)
from iam.infrastructure.invitation_repository import InvitationRepository
from iam.infrastructure.models import InvitationModel, SessionTokenModel, TenantModel
from iam.infrastructure.session_token_repository import SessionTokenRepository
from iam.infrastructure.tenant_repository import TenantRepository
from iam.ports.exceptions import DuplicateTenantSlugError
from shared_kernel.authorization.types import Role

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


@pytest.fixture
def mock_session():
    return AsyncMock()


def _result(model=None, rows=None, rowcount=0):
    result = MagicMock()
    result.scalar_one_or_none.return_value = model
    result.scalars.return_value.all.return_value = rows or []
    result.rowcount = rowcount
    return result


def _sql(mock_session) -> str:
    stmt = mock_session.execute.call_args[0][0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestTenantRepository:
    @pytest.mark.asyncio
    async def test_new_tenant_copies_settings(self, mock_session):
        tenant = Tenant.create(name="Acme", slug="acme")
        mock_session.execute.return_value = _result(None)

        await TenantRepository(session=mock_session).save(tenant)

        added = mock_session.add.call_args[0][0]
        assert isinstance(added, TenantModel)
        assert added.slug == "acme"
        assert added.settings == tenant.settings
        assert added.settings is not tenant.settings

    @pytest.mark.asyncio
    async def test_slug_race_maps_to_domain_error(self, mock_session):
        mock_session.execute.return_value = _result(None)
        mock_session.flush.side_effect = IntegrityError(
            "INSERT INTO tenants ...",
            {},
            Exception("duplicate key violates unique constraint uq_tenants_slug"),
        )

        with pytest.raises(DuplicateTenantSlugError):
            await TenantRepository(session=mock_session).save(
                Tenant.create(name="Acme", slug="acme")
            )

    @pytest.mark.asyncio
    async def test_list_all_is_ordered_by_name(self, mock_session):
        mock_session.execute.return_value = _result(rows=[])

        assert await TenantRepository(session=mock_session).list_all() == []
        assert "ORDER BY tenants.name" in _sql(mock_session)


class TestSessionTokenRepository:
    @pytest.mark.asyncio
    async def test_add_stores_hash_only(self, mock_session):
        token = SessionToken.issue(
            principal_id=PrincipalId.generate(),
            token_hash="ab" * 32,
            context=TokenContext.SESSION,
            now=NOW,
        )

        await SessionTokenRepository(session=mock_session).add(token)

        added = mock_session.add.call_args[0][0]
        assert isinstance(added, SessionTokenModel)
        assert added.token_hash == "ab" * 32
        assert added.context == "session"
        assert added.authenticated_at == NOW

    @pytest.mark.asyncio
    async def test_lookup_is_scoped_to_context(self, mock_session):
        mock_session.execute.return_value = _result(None)

        found = await SessionTokenRepository(session=mock_session).get_by_hash(
            "ab" * 32, TokenContext.MAGIC_LINK
        )

        assert found is None
        assert "session_tokens.context" in _sql(mock_session)

    @pytest.mark.asyncio
    async def test_bulk_delete_returns_hashes(self, mock_session):
        mock_session.execute.return_value = _result(rows=["h1", "h2"])

        hashes = await SessionTokenRepository(
            session=mock_session
        ).delete_for_principal(
            PrincipalId.generate(), TokenContext.SESSION, except_hash="h0"
        )

        assert hashes == ["h1", "h2"]
        sql = _sql(mock_session)
        assert "RETURNING session_tokens.token_hash" in sql
        assert "session_tokens.token_hash !=" in sql

    @pytest.mark.asyncio
    async def test_listing_is_newest_authentication_first(self, mock_session):
        model = SessionTokenModel(
            id=SessionTokenId.generate().value,
            principal_id=PrincipalId.generate().value,
            token_hash="ab" * 32,
            context="session",
            sent_to=None,
            created_at=NOW,
            authenticated_at=NOW,
        )
        mock_session.execute.return_value = _result(rows=[model])

        repository = SessionTokenRepository(session=mock_session)

        [token] = await repository.list_for_principal(
            PrincipalId(value=model.principal_id), TokenContext.SESSION
        )

        assert token.id.value == model.id
        assert token.context == TokenContext.SESSION
        assert "ORDER BY session_tokens.authenticated_at DESC" in _sql(mock_session)

    @pytest.mark.asyncio
    async def test_delete_by_id_is_scoped_to_owner(self, mock_session):
        mock_session.execute.return_value = _result(None)

        deleted = await SessionTokenRepository(session=mock_session).delete_by_id(
            PrincipalId.generate(), SessionTokenId.generate(), TokenContext.SESSION
        )

        assert deleted is None
        sql = _sql(mock_session)
        assert "session_tokens.principal_id =" in sql
        assert "session_tokens.context =" in sql
        assert "RETURNING session_tokens.token_hash" in sql

class TestInvitationRepository:
    def _model(self) -> InvitationModel:
        return InvitationModel(
            id=InvitationId.generate().value,
            email="jo@acme.test",
            role="viewer",
            tenant_id=TenantId.generate().value,
            token_hash="cd" * 32,
            expires_at=NOW + timedelta(days=7),
            status="pending",
            invited_by_id=None,
            accepted_at=None,
            created_at=NOW,
        )

    @pytest.mark.asyncio
    async def test_redeem_lookup_locks_row(self, mock_session):
        mock_session.execute.return_value = _result(self._model())

        invitation = await InvitationRepository(
            session=mock_session
        ).get_by_token_hash("cd" * 32, for_update=True)

        assert invitation.role == Role.VIEWER
        assert invitation.status == InvitationStatus.PENDING
        assert invitation.invited_by_id is None
        assert "FOR UPDATE" in _sql(mock_session)

    @pytest.mark.asyncio
    async def test_existing_row_only_updates_state(self, mock_session):
        model = self._model()
        mock_session.execute.return_value = _result(model)
        invitation = Invitation.create(
            email="jo@acme.test",
            role=Role.VIEWER,
            tenant_id=TenantId(value=model.tenant_id),
            token_hash="cd" * 32,
            validity=timedelta(days=7),
            now=NOW,
        )
        invitation.expire(NOW)

        await InvitationRepository(session=mock_session).save(invitation)

        mock_session.add.assert_not_called()
        assert model.status == "expired"

    @pytest.mark.asyncio
    async def test_sweep_is_one_conditional_update(self, mock_session):
        mock_session.execute.return_value = _result(rowcount=3)

        count = await InvitationRepository(
            session=mock_session
        ).expire_pending_before(NOW)

        assert count == 3
        sql = _sql(mock_session)
        assert sql.startswith("UPDATE invitations SET")
        assert "status=" in sql
        assert "invitations.status =" in sql
        assert "invitations.expires_at <" in sql
