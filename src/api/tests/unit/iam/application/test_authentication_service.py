"""Unit tests for AuthenticationService."""

import pytest

from iam.application.security import hash_token
from iam.application.services.authentication_service import (
    LOGIN_FAILED,
    LOGIN_SUCCEEDED,
    LOGOUT,
    MAGIC_LINK_REQUESTED,
)
from iam.ports.exceptions import (
    InvalidCredentialsError,
    SessionExpiredError,
    SessionNotFoundError,
)
from tests.unit.fakes import TEST_PASSWORD


def _link(token: str) -> str:
    return f"https://stockyard.test/auth/magic-link?token={token}"


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_success_issues_session_and_audits(
        self, authentication_service, token_repo, audit, clock, operator
    ):
        result = await authentication_service.authenticate(
            operator.email, TEST_PASSWORD, remember_me=True
        )

        assert result.principal is operator
        assert result.session.remember_me is True
        assert hash_token(result.session.token) in token_repo.tokens
        assert operator.last_login_at == clock()
        [entry] = audit.of(LOGIN_SUCCEEDED)
        assert entry.changes == {"method": "password", "remember_me": True}
        assert entry.tenant_id == operator.tenant_value

    @pytest.mark.asyncio
    async def test_wrong_password_is_audited_against_the_account(
        self, authentication_service, token_repo, audit, operator
    ):
        with pytest.raises(InvalidCredentialsError):
            await authentication_service.authenticate(operator.email, "guess")

        assert token_repo.tokens == {}
        [entry] = audit.entries
        assert entry.action == LOGIN_FAILED
        assert entry.resource_id == operator.id.value
        assert entry.changes == {"email": operator.email}

    @pytest.mark.asyncio
    async def test_unknown_email_fails_the_same_way(
        self, authentication_service, audit
    ):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await authentication_service.authenticate("Ghost@Acme.test", "guess")

        assert str(exc_info.value) == "Invalid email or password"
        [entry] = audit.entries
        assert entry.actor is None
        assert entry.changes == {"email": "ghost@acme.test"}

    @pytest.mark.asyncio
    async def test_inactive_principal_cannot_sign_in(
        self, authentication_service, operator
    ):
        operator.deactivate()
        operator.collect_events()

        with pytest.raises(InvalidCredentialsError):
            await authentication_service.authenticate(operator.email, TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_forced_change_is_reported(
        self, authentication_service, operator
    ):
        operator.must_change_password = True

        result = await authentication_service.authenticate(
            operator.email, TEST_PASSWORD
        )

        assert result.must_change_password is True


class TestLogout:
    @pytest.mark.asyncio
    async def test_revokes_token_and_audits(
        self, authentication_service, token_repo, audit, operator
    ):
        result = await authentication_service.authenticate(
            operator.email, TEST_PASSWORD
        )

        await authentication_service.logout(
            result.session.token, scope=operator.to_scope()
        )

        assert token_repo.tokens == {}
        assert audit.actions[-1] == LOGOUT

    @pytest.mark.asyncio
    async def test_unknown_token_is_harmless(self, authentication_service, audit):
        await authentication_service.logout("never-issued")

        assert audit.entries == []


class TestMagicLink:
    @pytest.mark.asyncio
    async def test_request_mails_link(
        self, authentication_service, notifier, audit, operator
    ):
        await authentication_service.request_magic_link(operator.email, _link)

        [(email, url)] = notifier.magic_links
        assert email == operator.email
        assert url.startswith("https://stockyard.test/auth/magic-link?token=")
        assert audit.actions == [MAGIC_LINK_REQUESTED]

    @pytest.mark.asyncio
    async def test_unknown_email_is_silent(
        self, authentication_service, notifier, audit
    ):
        await authentication_service.request_magic_link("ghost@acme.test", _link)

        assert notifier.magic_links == []
        assert audit.entries == []

    @pytest.mark.asyncio
    async def test_link_signs_in_once(
        self, authentication_service, notifier, audit, operator
    ):
        await authentication_service.request_magic_link(operator.email, _link)
        token = notifier.magic_links[0][1].rsplit("=", 1)[1]

        result = await authentication_service.login_with_magic_link(token)

        assert result.principal is operator
        assert audit.of(LOGIN_SUCCEEDED)[0].changes["method"] == "magic_link"
        with pytest.raises(SessionNotFoundError):
            await authentication_service.login_with_magic_link(token)

    @pytest.mark.asyncio
    async def test_stale_link_is_rejected(
        self, authentication_service, notifier, clock, operator
    ):
        await authentication_service.request_magic_link(operator.email, _link)
        token = notifier.magic_links[0][1].rsplit("=", 1)[1]
        clock.advance(minutes=16)

        with pytest.raises(SessionExpiredError):
            await authentication_service.login_with_magic_link(token)

    @pytest.mark.asyncio
    async def test_session_token_cannot_be_used_as_link(
        self, authentication_service, operator
    ):
        result = await authentication_service.authenticate(
            operator.email, TEST_PASSWORD
        )

        with pytest.raises(SessionNotFoundError):
            await authentication_service.login_with_magic_link(result.session.token)
