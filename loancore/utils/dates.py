from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone

ONE_DAY = timedelta(days=1)


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _parse_iso(value: str) -> date | datetime | None:
    cleaned = value.strip()
    if not cleaned:
        return None
    try:
        return date.fromisoformat(cleaned)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError:
        return None


def coerce_moment(value) -> date | datetime | None:
    """Return ``value`` as a ``date`` or ``datetime``, or ``None`` when it is missing or unparsable.

    Date-only strings (``2024-01-06``) become ``date``; strings carrying a time
    (``2024-01-06T10:30:00``, optionally with an offset or ``Z``) become ``datetime``.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return _parse_iso(value)
    return None


def coerce_date(value) -> date | None:
    moment = coerce_moment(value)
    if isinstance(moment, datetime):
        return moment.date()
    return moment


def _as_utc_naive(moment: date | datetime) -> datetime:
    # Naive values are read as UTC, date-only values as UTC midnight.
    if not isinstance(moment, datetime):
        return datetime(moment.year, moment.month, moment.day)
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def whole_days_between(start, end) -> int | None:
    """Signed whole days elapsed from ``start`` to ``end``, floored; ``None`` if either is unusable.

    Two plain dates give their calendar-day difference. When either side
    carries a time of day, the elapsed duration is floored to whole days,
    with aware values converted to UTC first.
    """
    start_moment = coerce_moment(start)
    end_moment = coerce_moment(end)
    if start_moment is None or end_moment is None:
        return None
    if not isinstance(start_moment, datetime) and not isinstance(end_moment, datetime):
        return (end_moment - start_moment).days
    return (_as_utc_naive(end_moment) - _as_utc_naive(start_moment)) // ONE_DAY
