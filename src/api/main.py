"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from audit.dependencies import get_audit_service
from audit.presentation import router as audit_router
from iam.application.services.root_admin_bootstrap_service import (
    RootAdminBootstrapService,
)
from iam.dependencies.repositories import get_notifier
from iam.dependencies.services import build_invitation_service
from iam.infrastructure.invitation_sweeper import InvitationExpirySweeper
from iam.infrastructure.principal_repository import PrincipalRepository
from iam.presentation import auth_router
from iam.presentation import router as iam_router
from infrastructure.database.dependencies import (
    close_database_connections,
    get_sessionmaker,
)
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import (
    get_bootstrap_settings,
    get_credential_settings,
    get_invitation_settings,
    get_settings,
)
from infrastructure.version import __version__

logger = structlog.get_logger()


async def bootstrap_root_admin() -> None:
    """Create the configured root admin if it does not exist yet."""
    probe = DefaultStartupProbe()
    settings = get_bootstrap_settings()
    if not settings.enabled:
        probe.root_admin_bootstrap_skipped()
        return

    assert settings.root_admin_email is not None
    assert settings.root_admin_password is not None
    async with get_sessionmaker()() as session:
        service = RootAdminBootstrapService(
            principal_repository=PrincipalRepository(session=session),
            session=session,
            bcrypt_rounds=get_credential_settings().bcrypt_rounds,
            probe=probe,
        )
        await service.ensure_root_admin(
            settings.root_admin_email,
            settings.root_admin_password.get_secret_value(),
        )


@asynccontextmanager
async def invitation_sweeper_lifespan(app: FastAPI):
    """Run the invitation expiry sweeper for the lifetime of the app."""
    settings = get_invitation_settings()
    if not settings.sweeper_enabled:
        yield
        return

    audit = get_audit_service()
    notifier = get_notifier()
    sweeper = InvitationExpirySweeper(
        session_factory=get_sessionmaker(),
        service_factory=lambda session: build_invitation_service(
            session, audit, notifier
        ),
        interval_seconds=settings.sweep_interval_seconds,
    )
    await sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()


@asynccontextmanager
async def stockyard_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Root admin bootstrap
    - Invitation expiry sweeper
    - Database engine lifecycle (created lazily, disposed on shutdown)
    """
    configure_logging(debug=get_settings().debug)
    probe = DefaultStartupProbe()

    await bootstrap_root_admin()

    async with invitation_sweeper_lifespan(app):
        probe.application_started(__version__)
        yield

    await close_database_connections()
    probe.application_stopped()


app = FastAPI(
    title="Stockyard API",
    description="Identity, authorization and audit for multi-tenant inventory",
    version=__version__,
    lifespan=stockyard_lifespan,
)

app.include_router(auth_router)
app.include_router(iam_router)
app.include_router(audit_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log unexpected errors and return a body without internal details."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
