"""Clock and display formatting built on Pendulum.

Stored timestamps are whole Unix seconds in UTC. Everything human-facing
goes through `TimeService`, which renders in the configured timezone.
"""

import os
from datetime import datetime

import pendulum
from pendulum import DateTime

TIMEZONE_ENV_VAR = "QUIRE_TIMEZONE"
DISPLAY_FORMAT = "dddd, MMMM D, YYYY, h:mm A"

Moment = datetime | DateTime | int


def _known_timezone(name: str) -> bool:
    try:
        pendulum.timezone(name)
    except Exception:
        return False
    return True


def _local_timezone() -> str | None:
    try:
        return pendulum.local_timezone().name
    except Exception:
        return None


class TimeService:
    """Wall clock plus timestamp conversion and formatting."""

    def __init__(self, timezone: str | None = None):
        """Use `timezone` if given, else QUIRE_TIMEZONE, the system zone, then UTC."""
        self.timezone = timezone or self._detect_timezone()

    def _detect_timezone(self) -> str:
        configured = os.environ.get(TIMEZONE_ENV_VAR)
        if configured and _known_timezone(configured):
            return configured
        return _local_timezone() or "UTC"

    def now(self) -> DateTime:
        """Get current time in UTC."""
        return pendulum.now("UTC")

    def timestamp(self) -> int:
        """Current Unix timestamp in whole seconds."""
        return int(self.now().timestamp())

    def from_timestamp(self, ts: int) -> DateTime:
        return pendulum.from_timestamp(ts, tz="UTC")

    def _as_datetime(self, moment: Moment) -> DateTime:
        if isinstance(moment, int):
            return self.from_timestamp(moment)
        if isinstance(moment, DateTime):
            return moment
        return pendulum.instance(moment)

    def format_datetime(self, moment: Moment, tz: str | None = None) -> str:
        """Render like "Monday, August 4, 2025, 12:42 PM PDT"."""
        local = self._as_datetime(moment).in_timezone(tz or self.timezone)
        return f"{local.format(DISPLAY_FORMAT)} {local.strftime('%Z')}"

    def format_age(self, moment: Moment) -> str:
        """Relative age such as "5 minutes ago".

        Hours are used up to two days, then days up to a week, then weeks
        up to a month. Anything older, or in the future, is left to Pendulum.
        """
        then = self._as_datetime(moment)
        now = self.now()
        if then > now:
            return then.diff_for_humans()

        elapsed = now.diff(then)
        seconds = elapsed.total_seconds()
        if seconds < 60:
            return "just now"
        if seconds < 3600:
            return _plural(int(seconds // 60), "minute")
        if seconds < 48 * 3600:
            return _plural(int(seconds // 3600), "hour")

        days = elapsed.in_days()
        if days < 7:
            return _plural(days, "day")
        if days < 30:
            return _plural(days // 7, "week")
        return then.diff_for_humans()


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit} ago" if count == 1 else f"{count} {unit}s ago"
