"""
Calendar and time-slot arithmetic
Month grids, week ranges, slot tables and the overlap test shared by every view
"""
import calendar
import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

WEEKDAY_LABELS_SUNDAY_FIRST = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']
WEEKDAY_LABELS_MONDAY_FIRST = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']


def get_timezone(name):
    """
    Resolve a timezone name for display conversion

    Args:
        name: IANA zone name, e.g. 'Pacific/Auckland'; 'UTC' or empty gives UTC

    Returns:
        tzinfo
    """
    if not name or name.upper() == 'UTC':
        return timezone.utc
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning("Unknown timezone %r, falling back to UTC", name)
        return timezone.utc


def system_clock(tz):
    """Clock returning the current naive local time in `tz`"""
    def now():
        return datetime.now(tz).replace(tzinfo=None)
    return now


def parse_datetime(value, tz=None):
    """
    Parse an ISO-8601 timestamp into a naive local datetime

    Aware values are converted into `tz` first; naive values are taken as
    already local. Anything unparseable yields None.

    Args:
        value: ISO string (trailing 'Z' accepted), datetime, date or None
        tz: display timezone (default UTC)

    Returns:
        datetime or None
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(tz or timezone.utc).replace(tzinfo=None)
        except (ValueError, OverflowError):
            # Converts past datetime.min/max
            return None
    return parsed


def parse_date(value):
    """Parse 'YYYY-MM-DD' (or a full ISO timestamp) into a date; None if invalid"""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def days_in_month(year, month):
    return calendar.monthrange(year, month)[1]


def add_months(d, months, preferred_day=None):
    """
    Step a date by whole months, clamping to the end of the target month

    Args:
        d: starting date
        months: signed number of months
        preferred_day: day-of-month to aim for (defaults to d.day)

    Returns:
        date: e.g. 2024-01-31 + 1 month -> 2024-02-29
    """
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = preferred_day or d.day
    return date(year, month, min(day, days_in_month(year, month)))


def add_years(d, years, preferred_day=None):
    """Step a date by whole years (Feb 29 clamps to Feb 28)"""
    return add_months(d, years * 12, preferred_day=preferred_day)


def calendar_grid(month_anchor):
    """
    Build the month grid for the month containing `month_anchor`

    Weeks start on Sunday. Cells before the 1st and after the last day are
    None so the grid is always whole weeks.

    Returns:
        list: dates and None placeholders, len(...) % 7 == 0
    """
    year, month = month_anchor.year, month_anchor.month
    first = date(year, month, 1)
    leading = (first.weekday() + 1) % 7  # Sunday=0

    cells = [None] * leading
    cells.extend(date(year, month, day) for day in range(1, days_in_month(year, month) + 1))
    trailing = (-len(cells)) % 7
    cells.extend([None] * trailing)
    return cells


def month_days(year, month):
    """All dates of a month, no padding"""
    return [date(year, month, day) for day in range(1, days_in_month(year, month) + 1)]


def week_dates(anchor):
    """
    Monday-to-Sunday week containing `anchor`

    Returns:
        list: 7 consecutive dates, first is a Monday
    """
    monday = anchor - timedelta(days=anchor.isoweekday() - 1)
    return [monday + timedelta(days=i) for i in range(7)]


def time_slots(start_hour, end_hour, step_minutes, include_end=False):
    """
    Enumerate slot start times across a daily window

    Args:
        start_hour: first slot starts at start_hour:00
        end_hour: window boundary hour
        step_minutes: slot length
        include_end: also emit a slot starting at end_hour:00

    Returns:
        list of (hour, minute) tuples in order
    """
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")

    slots = []
    minute_of_day = start_hour * 60
    end = end_hour * 60
    while minute_of_day < end or (include_end and minute_of_day == end):
        slots.append(divmod(minute_of_day, 60))
        minute_of_day += step_minutes
    return slots


def overlaps(appt_start, appt_minutes, slot_start, slot_minutes):
    """
    Half-open interval intersection of an appointment and a slot

    [appt_start, appt_start + appt_minutes) intersects
    [slot_start, slot_start + slot_minutes)
    """
    if appt_start is None or slot_start is None:
        return False
    appt_end = appt_start + timedelta(minutes=appt_minutes)
    slot_end = slot_start + timedelta(minutes=slot_minutes)
    return appt_start < slot_end and appt_end > slot_start


def is_same_day(a, b):
    """Compare calendar date components only"""
    if a is None or b is None:
        return False
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def is_today(d, today):
    return is_same_day(d, today)
