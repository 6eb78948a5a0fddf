from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def isoformat(moment: datetime) -> str:
    """Render ``moment`` as a millisecond ISO-8601 UTC string ending in ``Z``."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def epoch_micros(moment: datetime) -> int:
    return int(moment.timestamp() * 1_000_000)
