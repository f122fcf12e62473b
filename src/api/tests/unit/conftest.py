"""Unit test fixtures wiring services to in-memory fakes."""

from datetime import UTC, datetime, timedelta

import pytest

from iam.application.services import (
    AuthenticationService,
    CredentialService,
    InvitationService,
    PrincipalService,
    SessionPolicy,
    SessionService,
    TenantService,
)
from iam.domain.value_objects import TokenContext
from shared_kernel.authorization.guard import TenantIsolationGuard
from shared_kernel.authorization.types import Role
from shared_kernel.events import InMemoryEventBus
from tests.unit.fakes import (
    TEST_BCRYPT_ROUNDS,
    FakeClock,
    FakeSession,
    InMemoryInvitationRepository,
    InMemoryPrincipalRepository,
    InMemorySessionTokenRepository,
    InMemoryTenantRepository,
    RecordingAuditLogger,
    RecordingNotifier,
    make_principal,
    make_tenant,
)

MIN_PASSWORD_LENGTH = 12


@pytest.fixture
def clock():
    """Clock frozen at a fixed instant."""
    return FakeClock(datetime(2026, 3, 2, 9, 0, tzinfo=UTC))


@pytest.fixture
def audit():
    return RecordingAuditLogger()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def event_bus():
    return InMemoryEventBus()


@pytest.fixture
def db_session():
    return FakeSession()


@pytest.fixture
def guard(audit):
    return TenantIsolationGuard(audit=audit)


@pytest.fixture
def principal_repo():
    return InMemoryPrincipalRepository()


@pytest.fixture
def tenant_repo():
    return InMemoryTenantRepository()


@pytest.fixture
def token_repo():
    return InMemorySessionTokenRepository()


@pytest.fixture
def invitation_repo():
    return InMemoryInvitationRepository()


@pytest.fixture
def session_policy():
    return SessionPolicy(
        inactivity_window=timedelta(hours=24),
        reissue_after=timedelta(days=7),
        remember_me_max_age=timedelta(days=14),
        mailed_token_max_ages={TokenContext.MAGIC_LINK: timedelta(minutes=15)},
    )


@pytest.fixture
def session_service(
    db_session, token_repo, principal_repo, audit, event_bus, session_policy, clock
):
    return SessionService(
        session=db_session,
        token_repository=token_repo,
        principal_repository=principal_repo,
        audit=audit,
        event_bus=event_bus,
        policy=session_policy,
        clock=clock,
    )


@pytest.fixture
def credential_service(
    db_session, principal_repo, session_service, guard, audit, notifier, clock
):
    return CredentialService(
        session=db_session,
        principal_repository=principal_repo,
        session_service=session_service,
        guard=guard,
        audit=audit,
        email_change_notifier=notifier,
        min_password_length=MIN_PASSWORD_LENGTH,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        clock=clock,
    )


@pytest.fixture
def authentication_service(credential_service, session_service, audit, notifier):
    return AuthenticationService(
        credential_service=credential_service,
        session_service=session_service,
        audit=audit,
        magic_link_notifier=notifier,
    )


@pytest.fixture
def principal_service(
    db_session, principal_repo, tenant_repo, session_service, guard, audit, clock
):
    return PrincipalService(
        session=db_session,
        principal_repository=principal_repo,
        tenant_repository=tenant_repo,
        session_service=session_service,
        guard=guard,
        audit=audit,
        min_password_length=MIN_PASSWORD_LENGTH,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        clock=clock,
    )


@pytest.fixture
def tenant_service(db_session, tenant_repo, principal_repo, guard, audit, clock):
    return TenantService(
        session=db_session,
        tenant_repository=tenant_repo,
        principal_repository=principal_repo,
        guard=guard,
        audit=audit,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        clock=clock,
    )


@pytest.fixture
def invitation_service(
    db_session,
    invitation_repo,
    principal_repo,
    tenant_repo,
    guard,
    audit,
    notifier,
    clock,
):
    return InvitationService(
        session=db_session,
        invitation_repository=invitation_repo,
        principal_repository=principal_repo,
        tenant_repository=tenant_repo,
        guard=guard,
        audit=audit,
        notifier=notifier,
        validity=timedelta(days=7),
        min_password_length=MIN_PASSWORD_LENGTH,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        clock=clock,
    )


@pytest.fixture
def tenant(tenant_repo):
    """Tenant 'acme', stored."""
    return tenant_repo.add(make_tenant("acme"))


@pytest.fixture
def other_tenant(tenant_repo):
    """Tenant 'globex', stored."""
    return tenant_repo.add(make_tenant("globex"))


@pytest.fixture
def root_admin(principal_repo):
    return principal_repo.add(make_principal("root@stockyard.test", Role.ROOT_ADMIN))


@pytest.fixture
def tenant_admin(principal_repo, tenant):
    return principal_repo.add(
        make_principal("admin@acme.test", Role.TENANT_ADMIN, tenant)
    )


@pytest.fixture
def operator(principal_repo, tenant):
    return principal_repo.add(
        make_principal("operator@acme.test", Role.OPERATOR, tenant)
    )


@pytest.fixture
def viewer(principal_repo, tenant):
    return principal_repo.add(make_principal("viewer@acme.test", Role.VIEWER, tenant))


@pytest.fixture
def other_admin(principal_repo, other_tenant):
    return principal_repo.add(
        make_principal("admin@globex.test", Role.TENANT_ADMIN, other_tenant)
    )
