"""Repository and collaborator providers shared by the IAM services."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from audit.dependencies import get_audit_service
from iam.infrastructure.invitation_repository import InvitationRepository
from iam.infrastructure.notifier import LoggingNotifier
from iam.infrastructure.principal_repository import PrincipalRepository
from iam.infrastructure.session_token_repository import SessionTokenRepository
from iam.infrastructure.tenant_repository import TenantRepository
from infrastructure.database.dependencies import get_session
from infrastructure.settings import get_settings
from shared_kernel.audit.ports import IAuditLogger
from shared_kernel.authorization.guard import TenantIsolationGuard


def get_audit_logger() -> IAuditLogger:
    """Get the audit logger port implementation."""
    return get_audit_service()


def get_guard(
    audit: Annotated[IAuditLogger, Depends(get_audit_logger)],
) -> TenantIsolationGuard:
    """Get the tenant isolation guard, auditing denials through the audit logger."""
    return TenantIsolationGuard(audit=audit)


@lru_cache
def get_notifier() -> LoggingNotifier:
    """Get the notifier delivering invitation and magic-link URLs."""
    return LoggingNotifier(log_links=get_settings().log_delivery_links)


def get_principal_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PrincipalRepository:
    return PrincipalRepository(session=session)


def get_tenant_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TenantRepository:
    return TenantRepository(session=session)


def get_session_token_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionTokenRepository:
    return SessionTokenRepository(session=session)


def get_invitation_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> InvitationRepository:
    return InvitationRepository(session=session)
