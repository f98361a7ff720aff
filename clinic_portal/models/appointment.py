from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Optional

from clinic_portal.utils.calendar_utils import parse_datetime
from clinic_portal.utils.formatting import DEFAULT_PATIENT_LABEL, status_category

DEFAULT_DURATION_MINUTES = 60
MAX_DURATION_MINUTES = 24 * 60


def _coerce_duration(value):
    """Minutes as an int in 1..MAX_DURATION_MINUTES; anything else falls back to the default"""
    try:
        minutes = int(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_DURATION_MINUTES
    return minutes if 0 < minutes <= MAX_DURATION_MINUTES else DEFAULT_DURATION_MINUTES


def _coerce_start(value, tz, duration):
    """Local start, or None when unparseable or when the end would fall off the calendar"""
    start = parse_datetime(value, tz)
    if start is None:
        return None
    try:
        start + timedelta(minutes=duration)
    except OverflowError:
        return None
    return start


def _optional_str(value):
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


@dataclass(frozen=True)
class Appointment:
    """Appointment record as returned by the clinic API (read-only)"""

    id: str
    patient_name: Optional[str] = None
    patient_email: Optional[str] = None
    start: Optional[Any] = None  # naive local datetime, None when unscheduled
    duration: int = DEFAULT_DURATION_MINUTES
    status: Optional[str] = None
    notes: Optional[str] = None
    meet_link: Optional[str] = None
    appointment_type: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data, tz=None):
        """
        Build from an API record

        Malformed, missing or out-of-range appointmentDate leaves the
        record unscheduled instead of raising.
        """
        data = data or {}
        identifier = data.get('id', data.get('_id'))
        duration = _coerce_duration(data.get('duration'))
        return cls(
            id=str(identifier) if identifier is not None else '',
            patient_name=_optional_str(data.get('patientName')),
            patient_email=_optional_str(data.get('patientEmail')),
            start=_coerce_start(data.get('appointmentDate'), tz, duration),
            duration=duration,
            status=_optional_str(data.get('status')),
            notes=_optional_str(data.get('notes')),
            meet_link=_optional_str(data.get('meetLink')),
            appointment_type=_optional_str(data.get('appointmentType')),
            raw=dict(data),
        )

    @property
    def is_scheduled(self):
        return self.start is not None

    @property
    def end(self):
        if self.start is None:
            return None
        return self.start + timedelta(minutes=self.duration)

    @property
    def display_name(self):
        return self.patient_name or DEFAULT_PATIENT_LABEL

    @property
    def category(self):
        return status_category(self.status)

    def matches(self, search):
        """Case-insensitive substring match on patient name, email or notes"""
        if not search:
            return True
        needle = search.strip().lower()
        if not needle:
            return True
        return any(
            needle in value.lower()
            for value in (self.patient_name, self.patient_email, self.notes)
            if value
        )

    def __repr__(self):
        return f"<Appointment {self.id} - {self.display_name} at {self.start}>"
