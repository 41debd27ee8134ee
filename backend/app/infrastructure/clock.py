"""Clock — injectable time source so services never call datetime.now directly."""

from datetime import datetime, timezone


class SystemClock:
    """Wall-clock time in aware UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
