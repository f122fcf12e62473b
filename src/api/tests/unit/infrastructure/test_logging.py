"""Unit tests for logging configuration."""

import structlog

from infrastructure.logging import configure_logging, mask_secrets


def test_mask_secrets_replaces_secret_values():
    event = {"event": "login", "password": "hunter2", "token": "abc", "email": "a@b"}

    masked = mask_secrets(None, "info", event)

    assert masked == {
        "event": "login",
        "password": "***",
        "token": "***",
        "email": "a@b",
    }


def test_mask_secrets_leaves_other_events_alone():
    event = {"event": "pool_closed"}

    assert mask_secrets(None, "info", dict(event)) == event


def test_configure_logging_installs_masking():
    configure_logging(debug=True)
    try:
        assert mask_secrets in structlog.get_config()["processors"]
    finally:
        structlog.reset_defaults()
