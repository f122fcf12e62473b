"""Unit tests for AuditLogRepository."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from audit.domain import AuditEntry, AuditFilters
from audit.infrastructure import AuditLogRepository
from audit.infrastructure.models import AuditLogModel

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


@pytest.fixture
def mock_session():
    return AsyncMock()


@pytest.fixture
def repository(mock_session):
    return AuditLogRepository(session=mock_session)


def _sql(mock_session) -> str:
    stmt = mock_session.execute.call_args[0][0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestAppend:
    @pytest.mark.asyncio
    async def test_adds_model_and_flushes(self, repository, mock_session):
        entry = AuditEntry.create(
            None, "tenant.created", occurred_at=NOW, changes={"slug": "acme"}
        )

        await repository.append(entry)

        added = mock_session.add.call_args[0][0]
        assert isinstance(added, AuditLogModel)
        assert added.id == entry.id
        assert added.changes == {"slug": "acme"}
        mock_session.flush.assert_awaited_once()
        mock_session.commit.assert_not_called()


class TestQuery:
    @pytest.mark.asyncio
    async def test_scoped_newest_first(self, repository, mock_session):
        model = AuditLogModel(
            id="01JENTRY000000000000000000",
            action="login.succeeded",
            occurred_at=NOW,
            tenant_id="01JACME",
            changes=None,
        )
        result = MagicMock()
        result.scalars.return_value.all.return_value = [model]
        mock_session.execute.return_value = result

        entries = await repository.query(
            "01JACME", AuditFilters(action="login.succeeded", limit=10, offset=20)
        )

        sql = _sql(mock_session)
        assert "audit_log.tenant_id = " in sql
        assert "audit_log.action = " in sql
        assert "ORDER BY audit_log.occurred_at DESC, audit_log.id DESC" in sql
        assert "LIMIT" in sql and "OFFSET" in sql
        assert entries[0].changes == {}
        assert entries[0].tenant_id == "01JACME"

    @pytest.mark.asyncio
    async def test_unscoped_for_all_tenants(self, repository, mock_session):
        mock_session.execute.return_value = MagicMock()

        await repository.query(None, AuditFilters())

        assert "tenant_id =" not in _sql(mock_session)

    @pytest.mark.asyncio
    async def test_count(self, repository, mock_session):
        result = MagicMock()
        result.scalar_one.return_value = 7
        mock_session.execute.return_value = result

        count = await repository.count("01JACME", "login.succeeded", NOW)

        assert count == 7
        sql = _sql(mock_session)
        assert "count(audit_log.id)" in sql
        assert "audit_log.occurred_at >= " in sql
