from datetime import datetime, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from tradeshare.core.entities.time_window import HistoryRange, TimeWindow
from tradeshare.core.exceptions import InvalidRangeError

# Broker history is reported in the broker's server time, not the caller's.
BROKER_UTC_OFFSET_HOURS = 3


def parse_history_range(value: Union[HistoryRange, int, str, None]) -> HistoryRange:
    """
    Accepts a HistoryRange, its integer code (1/2/3), a numeric string
    or a case-insensitive name ("today", "week", "month").
    """
    if isinstance(value, HistoryRange):
        return value
    if isinstance(value, bool) or value is None:
        raise InvalidRangeError()

    if isinstance(value, str):
        text = value.strip()
        if text.upper() in HistoryRange.__members__:
            return HistoryRange[text.upper()]
        try:
            value = int(text)
        except ValueError:
            raise InvalidRangeError()

    try:
        return HistoryRange(value)
    except (ValueError, TypeError):
        raise InvalidRangeError()


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def resolve(
    history_range: Union[HistoryRange, int, str, None],
    now: datetime,
    offset_hours: int = BROKER_UTC_OFFSET_HOURS
) -> TimeWindow:
    """
    Converts a coarse range selector into a concrete [start, end) window.

    Day boundaries are taken in `now`'s own timezone and shifted forward by
    the broker offset. MONTH subtracts one calendar month, clamping to the
    last day of shorter months.
    """
    selected = parse_history_range(history_range)

    if selected == HistoryRange.TODAY:
        day = now
    elif selected == HistoryRange.WEEK:
        day = now - timedelta(days=7)
    else:
        day = now - relativedelta(months=1)

    start = _midnight(day) + timedelta(hours=offset_hours)

    # Before the broker day has started, TODAY would invert.
    if start > now:
        start = now

    return TimeWindow(start=start, end=now)
