"""The audit trail can be appended to and read, never altered.

Every type that reaches stored entries exposes an exact set of public
methods, so a new update or delete path fails here first.
"""

import inspect

import pytest

from audit.application.audit_service import AuditService
from audit.infrastructure import AuditLogRepository
from audit.ports import IAuditLogRepository
from audit.presentation import router
from shared_kernel.audit.ports import IAuditLogger


def _public_methods(cls: type) -> set[str]:
    return {
        name
        for name, member in inspect.getmembers(cls)
        if not name.startswith("_") and callable(member)
    }


@pytest.mark.parametrize(
    ("cls", "expected"),
    [
        (AuditService, {"record", "query", "activity_summary"}),
        (IAuditLogRepository, {"append", "query", "count"}),
        (AuditLogRepository, {"append", "query", "count"}),
        (IAuditLogger, {"record"}),
    ],
    ids=["service", "repository_port", "repository", "logger_port"],
)
def test_only_append_and_read_operations(cls, expected):
    assert _public_methods(cls) == expected


def test_every_audit_route_is_a_read():
    for route in router.routes:
        assert route.methods <= {"GET", "HEAD"}, route.path
