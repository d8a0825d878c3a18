"""Time source used by every access-window comparison.

Services receive a ``Clock`` instead of calling ``datetime.now`` directly so
window boundaries can be tested against a fixed instant.
"""

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Supplies the current instant (timezone-aware, UTC)."""

    def now(self) -> datetime:  # pragma: no cover - Protocol
        ...


class SystemClock:
    """Production clock backed by the platform time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt
