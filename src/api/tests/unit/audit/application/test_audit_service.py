"""Unit tests for AuditService."""

from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from audit.application.audit_service import AuditService
from audit.application.observability import AuditProbe
from audit.domain import AuditEntry, AuditFilters
from shared_kernel.audit.ports import RequestContext
from shared_kernel.authorization.exceptions import UnauthorizedError
from shared_kernel.authorization.types import Role, Scope
from shared_kernel.cache import InMemoryTTLCache
from tests.unit.fakes import FakeClock, FakeSession, InMemoryAuditLogRepository

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)
ACME = "01JACME0000000000000000000"
GLOBEX = "01JGLOBEX00000000000000000"


def _scope(role: Role, tenant_id: str | None = ACME) -> Scope:
    return Scope(
        principal_id=f"01J{role.name}",
        email=f"{role.value}@acme.test",
        role=role,
        tenant_id=tenant_id,
    )


@asynccontextmanager
async def _session_factory():
    yield FakeSession()


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def repository():
    return InMemoryAuditLogRepository()


@pytest.fixture
def probe():
    return MagicMock(spec=AuditProbe)


@pytest.fixture
def service(repository, probe, clock):
    return AuditService(
        session_factory=_session_factory,
        repository_factory=lambda session: repository,
        cache=InMemoryTTLCache(),
        probe=probe,
        clock=clock,
    )


def _entry(action: str, tenant_id: str | None, occurred_at: datetime) -> AuditEntry:
    return AuditEntry.create(
        None, action, occurred_at=occurred_at, tenant_id=tenant_id
    )


class TestRecord:
    @pytest.mark.asyncio
    async def test_appends_entry(self, service, repository, probe):
        admin = _scope(Role.TENANT_ADMIN)

        await service.record(
            admin,
            "principal.created",
            tenant_id=ACME,
            resource_type="principal",
            resource_id="01JNEW",
            changes={"role": "viewer", "password": "plain"},
            request=RequestContext(ip_address="10.0.0.1", user_agent="curl/8"),
        )

        [entry] = repository.entries
        assert entry.occurred_at == NOW
        assert entry.actor_email == admin.email
        assert entry.changes == {"role": "viewer", "password": "[REDACTED]"}
        assert entry.ip_address == "10.0.0.1"
        assert entry.user_agent == "curl/8"
        probe.entry_recorded.assert_called_once_with("principal.created", ACME)

    @pytest.mark.asyncio
    async def test_storage_failure_is_swallowed(self, repository, probe, clock):
        async def failing_append(entry):
            raise OperationalError("INSERT", {}, Exception("connection lost"))

        repository.append = failing_append
        service = AuditService(
            session_factory=_session_factory,
            repository_factory=lambda session: repository,
            cache=InMemoryTTLCache(),
            probe=probe,
            clock=clock,
        )

        await service.record(None, "invitation.expired", tenant_id=ACME)

        probe.entry_record_failed.assert_called_once()
        assert probe.entry_record_failed.call_args[0][:2] == (
            "invitation.expired",
            ACME,
        )
        probe.entry_recorded.assert_not_called()


class TestQuery:
    @pytest.mark.asyncio
    async def test_tenant_admin_is_pinned_to_own_tenant(self, service, repository):
        repository.entries.extend(
            [
                _entry("login.succeeded", ACME, NOW - timedelta(hours=1)),
                _entry("login.succeeded", GLOBEX, NOW - timedelta(hours=2)),
            ]
        )

        entries = await service.query(_scope(Role.TENANT_ADMIN), tenant_id=GLOBEX)

        assert [e.tenant_id for e in entries] == [ACME]

    @pytest.mark.asyncio
    async def test_root_admin_reads_everything(self, service, repository):
        repository.entries.extend(
            [
                _entry("login.succeeded", ACME, NOW - timedelta(hours=2)),
                _entry("login.succeeded", GLOBEX, NOW - timedelta(hours=1)),
            ]
        )

        entries = await service.query(_scope(Role.ROOT_ADMIN, tenant_id=None))

        assert [e.tenant_id for e in entries] == [GLOBEX, ACME]

    @pytest.mark.asyncio
    async def test_filters_are_applied(self, service, repository):
        repository.entries.extend(
            [
                _entry("login.succeeded", ACME, NOW - timedelta(hours=1)),
                _entry("login.failed", ACME, NOW - timedelta(hours=1)),
            ]
        )

        entries = await service.query(
            _scope(Role.TENANT_ADMIN), filters=AuditFilters(action="login.failed")
        )

        assert [e.action for e in entries] == ["login.failed"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [Role.OPERATOR, Role.VIEWER])
    async def test_non_admins_are_denied_and_audited(self, service, repository, role):
        with pytest.raises(UnauthorizedError):
            await service.query(_scope(role))

        [denial] = repository.entries
        assert denial.action == "authorization.denied"
        assert denial.tenant_id == ACME
        assert denial.changes["action"] == "view_audit_logs"


class TestActivitySummary:
    @pytest.mark.asyncio
    async def test_counts_logins_per_window(self, service, repository):
        repository.entries.extend(
            [
                _entry("login.succeeded", ACME, NOW - timedelta(days=1)),
                _entry("login.succeeded", ACME, NOW - timedelta(days=10)),
                _entry("login.succeeded", ACME, NOW - timedelta(days=40)),
                _entry("login.failed", ACME, NOW - timedelta(days=1)),
                _entry("login.succeeded", GLOBEX, NOW - timedelta(days=1)),
            ]
        )

        summary = await service.activity_summary(_scope(Role.TENANT_ADMIN))

        assert summary.tenant_id == ACME
        assert summary.logins_last_7_days == 1
        assert summary.logins_last_30_days == 2
        assert len(summary.recent) == 4
        assert summary.recent[0].occurred_at == NOW - timedelta(days=1)

    @pytest.mark.asyncio
    async def test_summary_is_cached(self, service, repository, probe):
        admin = _scope(Role.TENANT_ADMIN)
        repository.entries.append(
            _entry("login.succeeded", ACME, NOW - timedelta(days=1))
        )
        first = await service.activity_summary(admin)

        repository.entries.append(_entry("login.succeeded", ACME, NOW))
        second = await service.activity_summary(admin)

        assert second is first
        assert second.logins_last_7_days == 1
        probe.activity_summary_served.assert_called_with(ACME, cached=True)

    @pytest.mark.asyncio
    async def test_cache_is_per_tenant(self, service, repository):
        repository.entries.append(
            _entry("login.succeeded", ACME, NOW - timedelta(days=1))
        )
        await service.activity_summary(_scope(Role.TENANT_ADMIN))

        other = await service.activity_summary(_scope(Role.TENANT_ADMIN, GLOBEX))

        assert other.tenant_id == GLOBEX
        assert other.logins_last_7_days == 0
