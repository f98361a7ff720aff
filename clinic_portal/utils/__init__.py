from .calendar_utils import (
    get_timezone,
    system_clock,
    parse_datetime,
    parse_date,
    add_months,
    add_years,
    calendar_grid,
    week_dates,
    time_slots,
    overlaps,
    is_same_day,
    is_today,
)

from .formatting import (
    status_category,
    status_color,
    format_hour,
    format_time,
    format_date,
    format_month,
)

__all__ = [
    # Calendar arithmetic
    "get_timezone",
    "system_clock",
    "parse_datetime",
    "parse_date",
    "add_months",
    "add_years",
    "calendar_grid",
    "week_dates",
    "time_slots",
    "overlaps",
    "is_same_day",
    "is_today",
    # Formatting
    "status_category",
    "status_color",
    "format_hour",
    "format_time",
    "format_date",
    "format_month",
]
