from datetime import datetime, timezone
from typing import Optional

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''}"


def _span(seconds: float) -> str:
    if seconds < HOUR:
        return _plural(int(seconds // MINUTE), "minute")
    if seconds < DAY:
        return _plural(int(seconds // HOUR), "hour")

    days = int(seconds // DAY)
    if days <= 7:
        return _plural(days, "day")
    if days <= 30:
        return _plural(days // 7, "week")
    return _plural(days // 30, "month")


def format_time_ago(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """
    Coarse "time ago" label, e.g. "2 hours ago", "yesterday", "3 weeks ago".
    Future timestamps are labeled "in ..." instead of raising.
    """
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    delta = (current - _as_utc(timestamp)).total_seconds()

    if abs(delta) < MINUTE:
        return "just now"
    if delta < 0:
        return f"in {_span(-delta)}"
    if DAY <= delta < 2 * DAY:
        return "yesterday"
    return f"{_span(delta)} ago"
