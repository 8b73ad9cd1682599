"""Wall clock behind team timers, token expiry, cache TTLs and audit timestamps."""

from datetime import UTC, datetime


class SystemClock:
    """Timezone-aware UTC time; every stored timestamp in the event database is UTC."""

    def now_utc(self) -> datetime:
        return datetime.now(UTC)
