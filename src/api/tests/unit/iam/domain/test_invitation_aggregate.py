"""Unit tests for the Invitation aggregate state machine."""

from datetime import UTC, datetime, timedelta

import pytest

from iam.domain.aggregates import Invitation
from iam.domain.events import InvitationAccepted, InvitationCreated, InvitationExpired
from iam.domain.value_objects import InvitationStatus, PrincipalId, TenantId
from iam.ports.exceptions import (
    InvitationAlreadyAcceptedError,
    InvitationExpiredError,
    ValidationFailedError,
)
from shared_kernel.authorization.types import Role

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


def _invitation(role: Role = Role.OPERATOR) -> Invitation:
    invitation = Invitation.create(
        email="New.Hire@Acme.test",
        role=role,
        tenant_id=TenantId.generate(),
        token_hash="f" * 64,
        validity=timedelta(days=7),
        now=NOW,
    )
    return invitation


class TestInvitationCreation:
    def test_create_sets_expiry_and_pending_status(self):
        invitation = _invitation()

        assert invitation.status == InvitationStatus.PENDING
        assert invitation.expires_at == NOW + timedelta(days=7)
        assert invitation.email == "new.hire@acme.test"
        assert isinstance(invitation.collect_events()[0], InvitationCreated)

    @pytest.mark.parametrize("role", [Role.ROOT_ADMIN, Role.TENANT_ADMIN])
    def test_admin_roles_cannot_be_invited(self, role):
        with pytest.raises(ValidationFailedError) as exc_info:
            _invitation(role)

        assert exc_info.value.errors["role"] == ["must be operator or viewer"]


class TestInvitationTransitions:
    @pytest.fixture
    def invitation(self):
        invitation = _invitation()
        invitation.collect_events()
        return invitation

    def test_accept_one_second_before_expiry(self, invitation):
        principal_id = PrincipalId.generate()

        invitation.accept(principal_id, invitation.expires_at - timedelta(seconds=1))

        assert invitation.status == InvitationStatus.ACCEPTED
        [event] = invitation.collect_events()
        assert isinstance(event, InvitationAccepted)
        assert event.principal_id == principal_id.value

    def test_accept_exactly_at_expiry(self, invitation):
        invitation.accept(PrincipalId.generate(), invitation.expires_at)

        assert invitation.status == InvitationStatus.ACCEPTED

    def test_accept_one_second_after_expiry_raises(self, invitation):
        with pytest.raises(InvitationExpiredError):
            invitation.accept(
                PrincipalId.generate(), invitation.expires_at + timedelta(seconds=1)
            )

        assert invitation.status == InvitationStatus.PENDING

    def test_accept_twice_raises_already_accepted(self, invitation):
        invitation.accept(PrincipalId.generate(), NOW)

        with pytest.raises(InvitationAlreadyAcceptedError):
            invitation.accept(PrincipalId.generate(), NOW)

    def test_expire_is_terminal(self, invitation):
        invitation.expire(NOW)

        assert invitation.status == InvitationStatus.EXPIRED
        assert invitation.status.is_terminal
        assert isinstance(invitation.collect_events()[0], InvitationExpired)
        with pytest.raises(InvitationExpiredError):
            invitation.ensure_redeemable()

    def test_expire_does_not_touch_accepted_invitation(self, invitation):
        invitation.accept(PrincipalId.generate(), NOW)
        invitation.collect_events()

        invitation.expire(NOW)

        assert invitation.status == InvitationStatus.ACCEPTED
        assert invitation.collect_events() == []
