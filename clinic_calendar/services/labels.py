"""Header label for the visible range."""

from datetime import datetime

from clinic_calendar.models.view import DateRange, ViewMode


def format_label(date_range: DateRange, view: ViewMode | str) -> str:
    """Render the range for the calendar header.

    Month views read "November 2025". Day and week views read "Nov 3 — Nov 9",
    with the year on both ends only when the range crosses a year boundary.
    Month names follow the process locale.
    """
    start, end = date_range.start, date_range.end
    if ViewMode(view) is ViewMode.MONTH:
        return start.strftime("%B %Y")

    with_year = start.year != end.year
    return f"{_short_date(start, with_year)} — {_short_date(end, with_year)}"


def _short_date(value: datetime, with_year: bool) -> str:
    label = f"{value.strftime('%b')} {value.day}"
    return f"{label}, {value.year}" if with_year else label
