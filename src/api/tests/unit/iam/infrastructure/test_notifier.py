"""Unit tests for the logging notifier."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
import structlog

from iam.domain.aggregates import Invitation
from iam.domain.value_objects import TenantId
from iam.infrastructure.notifier import LoggingNotifier
from iam.ports.notifications import (
    IEmailChangeNotifier,
    IInvitationNotifier,
    IMagicLinkNotifier,
)
from shared_kernel.authorization.types import Role

URL = "https://stockyard.test/invitations/accept?token=secret-token"


@pytest.fixture
def mock_logger():
    return MagicMock(spec=structlog.stdlib.BoundLogger)


@pytest.fixture
def invitation():
    return Invitation.create(
        email="jo@acme.test",
        role=Role.VIEWER,
        tenant_id=TenantId.generate(),
        token_hash="ab" * 32,
        validity=timedelta(days=7),
    )


def test_implements_every_port():
    notifier = LoggingNotifier()

    assert isinstance(notifier, IInvitationNotifier)
    assert isinstance(notifier, IMagicLinkNotifier)
    assert isinstance(notifier, IEmailChangeNotifier)


@pytest.mark.asyncio
async def test_invitation_link_is_not_logged_by_default(mock_logger, invitation):
    notifier = LoggingNotifier(logger=mock_logger)

    await notifier.deliver_invitation(invitation, URL)

    mock_logger.info.assert_called_once_with(
        "invitation_delivery_requested",
        invitation_id=invitation.id.value,
        tenant_id=invitation.tenant_id.value,
        recipient="jo@acme.test",
    )


@pytest.mark.asyncio
async def test_links_are_logged_when_enabled(mock_logger):
    notifier = LoggingNotifier(log_links=True, logger=mock_logger)

    await notifier.deliver_magic_link("jo@acme.test", URL)

    mock_logger.info.assert_called_once_with(
        "magic_link_delivery_requested", recipient="jo@acme.test", url=URL
    )


@pytest.mark.asyncio
async def test_email_change_goes_to_the_new_address(mock_logger):
    notifier = LoggingNotifier(logger=mock_logger)

    await notifier.deliver_email_change_instructions("jo@new.test", URL)

    mock_logger.info.assert_called_once_with(
        "email_change_delivery_requested", recipient="jo@new.test"
    )
