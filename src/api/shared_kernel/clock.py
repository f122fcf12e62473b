"""Injectable time source.

Services take a ``Clock`` so expiry behaviour can be tested by moving time
instead of sleeping.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)
