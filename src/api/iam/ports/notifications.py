"""Ports for delivering links to people outside the system.

Mail transport is outside this service; an adapter decides how links
actually reach the recipient.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iam.domain.aggregates import Invitation


@runtime_checkable
class IInvitationNotifier(Protocol):
    """Delivers invitation links to invitees."""

    async def deliver_invitation(self, invitation: Invitation, url: str) -> None:
        """Hand an invitation link over for delivery.

        Args:
            invitation: The pending invitation
            url: Link containing the raw invitation token
        """
        ...


@runtime_checkable
class IMagicLinkNotifier(Protocol):
    """Delivers one-time sign-in links."""

    async def deliver_magic_link(self, email: str, url: str) -> None:
        """Hand a sign-in link over for delivery."""
        ...


@runtime_checkable
class IEmailChangeNotifier(Protocol):
    """Delivers confirmation links for a new e-mail address."""

    async def deliver_email_change_instructions(self, email: str, url: str) -> None:
        """Hand a confirmation link over for delivery to the new address."""
        ...
