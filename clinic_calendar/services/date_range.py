"""Date-range resolution for day, week and month views."""

from datetime import UTC, date, datetime, time, timedelta, tzinfo

from dateutil.relativedelta import relativedelta

from clinic_calendar.models.view import DateRange, ViewMode


def resolve_range(pivot: date | datetime, view: ViewMode | str, tz: tzinfo | None = None) -> DateRange:
    """Compute the inclusive window shown for ``pivot`` in ``view``.

    Weeks start on Sunday regardless of locale. Months end on their true last
    day, found by stepping back one day from the first of the next month.

    Args:
        pivot: Date the view is centred on. A datetime keeps its own tzinfo.
        view: day, week or month
        tz: Timezone applied to a plain date or a naive datetime

    Returns:
        Range from 00:00:00.000 on the first day to 23:59:59.999 on the last
    """
    view = ViewMode(view)
    day_start = start_of_day(pivot, tz)

    if view is ViewMode.DAY:
        start = day_start
        last_day = day_start
    elif view is ViewMode.WEEK:
        # weekday() is Monday=0, shift so Sunday=0
        start = day_start - timedelta(days=(day_start.weekday() + 1) % 7)
        last_day = start + timedelta(days=6)
    else:
        start = day_start.replace(day=1)
        last_day = start + relativedelta(months=1) - timedelta(days=1)

    return DateRange(start=start, end=end_of_day(last_day))


def start_of_day(value: date | datetime, tz: tzinfo | None = None) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None and tz is not None:
            value = value.replace(tzinfo=tz)
        return value.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime.combine(value, time(), tzinfo=tz)


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def to_iso_instant(value: datetime) -> str:
    """Format an instant as ISO-8601 UTC with millisecond precision, e.g. 2025-11-09T00:00:00.000Z."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
