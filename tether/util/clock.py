"""Time source."""

from datetime import datetime, timezone


class Clock:
    """Wall clock returning timezone-aware UTC datetimes.

    Injected into services and stores so tests can control time.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
