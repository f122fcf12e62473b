"""Unit tests for audit entries and filters."""

from datetime import UTC, datetime

import pytest

from audit.domain import REDACTED, AuditEntry, AuditFilters, normalize_ip, redact
from shared_kernel.authorization.types import Role, Scope

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


@pytest.fixture
def actor():
    return Scope(
        principal_id="01JACTOR000000000000000000",
        email="admin@acme.test",
        role=Role.TENANT_ADMIN,
        tenant_id="01JTENANT00000000000000000",
    )


class TestRedact:
    def test_sensitive_keys_are_replaced(self):
        assert redact({"new_password": "s3cret", "role": "viewer"}) == {
            "new_password": REDACTED,
            "role": "viewer",
        }

    def test_matching_ignores_case(self):
        assert redact({"API_Token": "abc"}) == {"API_Token": REDACTED}

    def test_flags_named_after_secrets_are_kept(self):
        changes = {"must_change_password": True, "password_changed_at": "2026"}

        assert redact(changes) == changes

    def test_secret_suffixes_are_redacted(self):
        changes = {"token_hash": "ab12", "client_secret": "x", "password": "p"}

        assert redact(changes) == {
            "token_hash": REDACTED,
            "client_secret": REDACTED,
            "password": REDACTED,
        }

    def test_nested_containers(self):
        changes = {"before": {"password_hash": "$2b$"}, "items": [{"secret": 1}]}

        assert redact(changes) == {
            "before": {"password_hash": REDACTED},
            "items": [{"secret": REDACTED}],
        }


class TestNormalizeIp:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("192.168.0.1", "192.168.0.1"),
            (" 10.0.0.7 ", "10.0.0.7"),
            ("2001:DB8:0:0:0:0:0:1", "2001:db8::1"),
            ("not-an-ip", None),
            ("", None),
            (None, None),
            ("1" * 46, None),
        ],
    )
    def test_normalization(self, raw, expected):
        assert normalize_ip(raw) == expected


class TestAuditEntryCreate:
    def test_snapshots_the_actor(self, actor):
        entry = AuditEntry.create(actor, "principal.created", occurred_at=NOW)

        assert entry.actor_id == actor.principal_id
        assert entry.actor_email == "admin@acme.test"
        assert entry.actor_role == "tenant_admin"
        assert len(entry.id) == 26

    def test_system_actions_have_no_actor(self):
        entry = AuditEntry.create(None, "invitation.expired", occurred_at=NOW)

        assert entry.actor_id is None
        assert entry.actor_email is None
        assert entry.actor_role is None

    def test_changes_are_redacted(self, actor):
        entry = AuditEntry.create(
            actor,
            "principal.password_reset",
            occurred_at=NOW,
            changes={"temporary_password": "hunter2hunter2"},
        )

        assert entry.changes == {"temporary_password": REDACTED}

    def test_invalid_ip_is_dropped_and_user_agent_truncated(self, actor):
        entry = AuditEntry.create(
            actor,
            "login.succeeded",
            occurred_at=NOW,
            ip_address="bogus",
            user_agent="x" * 600,
        )

        assert entry.ip_address is None
        assert len(entry.user_agent) == 512

    def test_entries_are_immutable(self, actor):
        entry = AuditEntry.create(actor, "login.succeeded", occurred_at=NOW)

        with pytest.raises(AttributeError):
            entry.action = "login.failed"


class TestAuditFilters:
    def test_defaults(self):
        filters = AuditFilters()

        assert filters.limit == 50
        assert filters.offset == 0

    @pytest.mark.parametrize("limit", [0, 501])
    def test_limit_bounds(self, limit):
        with pytest.raises(ValueError, match="limit"):
            AuditFilters(limit=limit)

    def test_negative_offset(self):
        with pytest.raises(ValueError, match="offset"):
            AuditFilters(offset=-1)
