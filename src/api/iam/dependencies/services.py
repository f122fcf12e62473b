"""Application service providers for IAM bounded context.

Repositories share the request's session through FastAPI dependency
caching, so every service in one request works on the same session.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.services import (
    AuthenticationService,
    CredentialService,
    InvitationService,
    PrincipalService,
    SessionPolicy,
    SessionService,
    TenantService,
)
from iam.dependencies.repositories import (
    get_audit_logger,
    get_guard,
    get_invitation_repository,
    get_notifier,
    get_principal_repository,
    get_session_token_repository,
    get_tenant_repository,
)
from iam.domain.value_objects import TokenContext
from iam.infrastructure.invitation_repository import InvitationRepository
from iam.infrastructure.notifier import LoggingNotifier
from iam.infrastructure.principal_repository import PrincipalRepository
from iam.infrastructure.session_token_repository import SessionTokenRepository
from iam.infrastructure.tenant_repository import TenantRepository
from infrastructure.database.dependencies import get_session
from infrastructure.dependencies import get_event_bus
from infrastructure.settings import (
    get_credential_settings,
    get_invitation_settings,
    get_session_settings,
)
from shared_kernel.audit.ports import IAuditLogger
from shared_kernel.authorization.guard import TenantIsolationGuard
from shared_kernel.events import IEventBus


def get_session_policy() -> SessionPolicy:
    """Build the session policy from settings."""
    settings = get_session_settings()
    return SessionPolicy(
        inactivity_window=settings.inactivity_window,
        reissue_after=settings.reissue_after,
        remember_me_max_age=settings.remember_me_max_age,
        mailed_token_max_ages={
            TokenContext.MAGIC_LINK: settings.magic_link_max_age,
            TokenContext.PASSWORD_RESET: settings.password_reset_max_age,
            TokenContext.EMAIL_CHANGE: settings.email_change_max_age,
        },
    )


def get_session_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    tokens: Annotated[SessionTokenRepository, Depends(get_session_token_repository)],
    principals: Annotated[PrincipalRepository, Depends(get_principal_repository)],
    audit: Annotated[IAuditLogger, Depends(get_audit_logger)],
    event_bus: Annotated[IEventBus, Depends(get_event_bus)],
    policy: Annotated[SessionPolicy, Depends(get_session_policy)],
) -> SessionService:
    return SessionService(
        session=session,
        token_repository=tokens,
        principal_repository=principals,
        audit=audit,
        event_bus=event_bus,
        policy=policy,
    )


def get_credential_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    principals: Annotated[PrincipalRepository, Depends(get_principal_repository)],
    sessions: Annotated[SessionService, Depends(get_session_service)],
    guard: Annotated[TenantIsolationGuard, Depends(get_guard)],
    audit: Annotated[IAuditLogger, Depends(get_audit_logger)],
    notifier: Annotated[LoggingNotifier, Depends(get_notifier)],
) -> CredentialService:
    settings = get_credential_settings()
    return CredentialService(
        session=session,
        principal_repository=principals,
        session_service=sessions,
        guard=guard,
        audit=audit,
        email_change_notifier=notifier,
        min_password_length=settings.min_password_length,
        bcrypt_rounds=settings.bcrypt_rounds,
    )


def get_authentication_service(
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
    sessions: Annotated[SessionService, Depends(get_session_service)],
    audit: Annotated[IAuditLogger, Depends(get_audit_logger)],
    notifier: Annotated[LoggingNotifier, Depends(get_notifier)],
) -> AuthenticationService:
    return AuthenticationService(
        credential_service=credentials,
        session_service=sessions,
        audit=audit,
        magic_link_notifier=notifier,
    )


def build_invitation_service(
    session: AsyncSession,
    audit: IAuditLogger,
    notifier: LoggingNotifier,
) -> InvitationService:
    """Build an InvitationService bound to a session.

    Shared by the request dependency and the background expiry sweeper.
    """
    invitation_settings = get_invitation_settings()
    credential_settings = get_credential_settings()
    return InvitationService(
        session=session,
        invitation_repository=InvitationRepository(session=session),
        principal_repository=PrincipalRepository(session=session),
        tenant_repository=TenantRepository(session=session),
        guard=TenantIsolationGuard(audit=audit),
        audit=audit,
        notifier=notifier,
        validity=invitation_settings.validity,
        min_password_length=credential_settings.min_password_length,
        bcrypt_rounds=credential_settings.bcrypt_rounds,
    )


def get_invitation_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    audit: Annotated[IAuditLogger, Depends(get_audit_logger)],
    notifier: Annotated[LoggingNotifier, Depends(get_notifier)],
) -> InvitationService:
    return build_invitation_service(session, audit, notifier)


def get_principal_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    principals: Annotated[PrincipalRepository, Depends(get_principal_repository)],
    tenants: Annotated[TenantRepository, Depends(get_tenant_repository)],
    sessions: Annotated[SessionService, Depends(get_session_service)],
    guard: Annotated[TenantIsolationGuard, Depends(get_guard)],
    audit: Annotated[IAuditLogger, Depends(get_audit_logger)],
) -> PrincipalService:
    settings = get_credential_settings()
    return PrincipalService(
        session=session,
        principal_repository=principals,
        tenant_repository=tenants,
        session_service=sessions,
        guard=guard,
        audit=audit,
        min_password_length=settings.min_password_length,
        bcrypt_rounds=settings.bcrypt_rounds,
    )


def get_tenant_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    tenants: Annotated[TenantRepository, Depends(get_tenant_repository)],
    principals: Annotated[PrincipalRepository, Depends(get_principal_repository)],
    guard: Annotated[TenantIsolationGuard, Depends(get_guard)],
    audit: Annotated[IAuditLogger, Depends(get_audit_logger)],
) -> TenantService:
    return TenantService(
        session=session,
        tenant_repository=tenants,
        principal_repository=principals,
        guard=guard,
        audit=audit,
        bcrypt_rounds=get_credential_settings().bcrypt_rounds,
    )
