"""Background sweeper that expires overdue invitations.

The sweeper runs as a background task within the FastAPI application.
Each tick opens a fresh database session and asks the stateless
InvitationService to expire pending invitations past their deadline.
Redemption re-checks expiry on its own, so the sweep only tidies up
invitations nobody tried to redeem.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Callable, Protocol

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

if TYPE_CHECKING:
    from iam.application.services.invitation_service import InvitationService

logger = structlog.get_logger()


class InvitationSweeperProbe(Protocol):
    """Protocol for sweeper observability."""

    def sweeper_started(self, interval_seconds: float) -> None:
        """Called when the sweep loop starts."""
        ...

    def sweeper_stopped(self) -> None:
        """Called when the sweep loop stops."""
        ...

    def sweep_completed(self, expired: int) -> None:
        """Called after each successful tick."""
        ...

    def sweep_failed(self, error: str) -> None:
        """Called when a tick raises; the loop keeps running."""
        ...


class DefaultInvitationSweeperProbe:
    """Default probe implementation using structlog."""

    def __init__(self) -> None:
        self._log = logger.bind(component="invitation_sweeper")

    def sweeper_started(self, interval_seconds: float) -> None:
        self._log.info("invitation_sweeper_started", interval_seconds=interval_seconds)

    def sweeper_stopped(self) -> None:
        self._log.info("invitation_sweeper_stopped")

    def sweep_completed(self, expired: int) -> None:
        self._log.info("invitation_sweep_completed", expired=expired)

    def sweep_failed(self, error: str) -> None:
        self._log.error("invitation_sweep_failed", error=error)


class InvitationExpirySweeper:
    """Periodically expire pending invitations whose deadline has passed."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        service_factory: Callable[[AsyncSession], InvitationService],
        interval_seconds: float = 86400,
        probe: InvitationSweeperProbe | None = None,
    ) -> None:
        """Initialize the sweeper.

        Args:
            session_factory: Factory for creating database sessions
            service_factory: Builds an InvitationService bound to a session
            interval_seconds: Delay between ticks
            probe: Observability probe for logging
        """
        self._session_factory = session_factory
        self._service_factory = service_factory
        self._interval = interval_seconds
        self._probe = probe or DefaultInvitationSweeperProbe()
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the sweep loop as a background task."""
        self._running = True
        self._probe.sweeper_started(self._interval)
        self._task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._probe.sweeper_stopped()

    async def sweep_once(self) -> int:
        """Run a single sweep with its own session.

        Returns:
            Number of invitations expired
        """
        async with self._session_factory() as session:
            service = self._service_factory(session)
            return await service.sweep()

    async def _sweep_loop(self) -> None:
        while self._running:
            try:
                expired = await self.sweep_once()
                self._probe.sweep_completed(expired)
            except Exception as e:
                # The next tick retries; one failed tick must not stop the loop
                self._probe.sweep_failed(str(e))
            await asyncio.sleep(self._interval)
