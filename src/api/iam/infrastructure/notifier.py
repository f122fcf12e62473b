"""Notification adapters for invitation, magic-link and e-mail change links.

Mail transport lives outside this service. The logging notifier hands
each message to structlog so operators (and local development) can pick
the link up; deployments substitute a real transport behind the same ports.
"""

from __future__ import annotations

import structlog

from iam.domain.aggregates import Invitation
from iam.ports.notifications import (
    IEmailChangeNotifier,
    IInvitationNotifier,
    IMagicLinkNotifier,
)


class LoggingNotifier(IInvitationNotifier, IMagicLinkNotifier, IEmailChangeNotifier):
    """Notifier that records outgoing messages in the structured log."""

    def __init__(
        self,
        log_links: bool = False,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            log_links: Include the URL in the log line (development only,
                since the URL carries a bearer token)
            logger: Optional structlog logger
        """
        self._log = logger or structlog.get_logger().bind(component="notifier")
        self._log_links = log_links

    async def deliver_invitation(self, invitation: Invitation, url: str) -> None:
        self._log.info(
            "invitation_delivery_requested",
            invitation_id=invitation.id.value,
            tenant_id=invitation.tenant_id.value,
            recipient=invitation.email,
            **({"url": url} if self._log_links else {}),
        )

    async def deliver_magic_link(self, email: str, url: str) -> None:
        self._log.info(
            "magic_link_delivery_requested",
            recipient=email,
            **({"url": url} if self._log_links else {}),
        )

    async def deliver_email_change_instructions(self, email: str, url: str) -> None:
        self._log.info(
            "email_change_delivery_requested",
            recipient=email,
            **({"url": url} if self._log_links else {}),
        )
