"""
Display formatting for the appointments page
Status categories, colours, time and date labels (en-NZ conventions)
"""

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]

# Status -> chip category
STATUS_CATEGORIES = {
    'confirmed': 'success',
    'scheduled': 'success',
    'pending': 'warning',
    'cancelled': 'error',
    'completed': 'info',
}

# Category -> card colour
CATEGORY_COLORS = {
    'success': '#4caf50',
    'warning': '#ff9800',
    'error': '#f44336',
    'info': '#2196f3',
    'default': '#9c27b0',
}

DEFAULT_PATIENT_LABEL = 'Patient'


def status_category(status):
    """Map a free-form status onto a chip category; unknown -> 'default'"""
    if not isinstance(status, str):
        return 'default'
    return STATUS_CATEGORIES.get(status.strip().lower(), 'default')


def status_color(status):
    return CATEGORY_COLORS[status_category(status)]


def format_hour(hour, minute=0):
    """24-hour 'HH:MM' label for a slot"""
    if not isinstance(hour, int) or not isinstance(minute, int):
        return '00:00'
    return f"{hour:02d}:{minute:02d}"


def format_time(dt):
    """
    Clock label for an appointment start, e.g. '09:00 am'

    Returns 'N/A' when there is no time.
    """
    if dt is None:
        return 'N/A'
    hour_12 = dt.hour % 12 or 12
    period = 'am' if dt.hour < 12 else 'pm'
    return f"{hour_12:02d}:{dt.minute:02d} {period}"


def format_slot_label(hour, minute=0):
    """Booking option label, e.g. '2:30 PM'"""
    period = 'AM' if hour < 12 else 'PM'
    return f"{hour % 12 or 12}:{minute:02d} {period}"


def format_date(d):
    """Long date, e.g. '15 March 2024'"""
    return f"{d.day} {MONTH_NAMES[d.month - 1]} {d.year}"


def format_month(d):
    return f"{MONTH_NAMES[d.month - 1]} {d.year}"


def format_granularity(granularity):
    value = getattr(granularity, 'value', granularity) or ''
    return value[:1].upper() + value[1:]


def pluralize(count, noun):
    return f"{count} {noun}{'' if count == 1 else 's'}"
