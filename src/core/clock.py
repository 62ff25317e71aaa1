"""Clock abstraction injected into services that stamp timestamps."""

from datetime import datetime, timedelta, timezone

# Look-back windows longer than this are treated as "all time".
MAX_WINDOW_DAYS = 36500


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def window_start(clock, days: int) -> datetime:
    """Start of a look-back window of ``days`` ending now, clamped to a sane range."""
    return clock.now() - timedelta(days=min(max(days, 0), MAX_WINDOW_DAYS))


system_clock = SystemClock()


__all__ = ["MAX_WINDOW_DAYS", "SystemClock", "system_clock", "window_start"]
