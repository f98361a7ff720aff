"""
Appointment data accessor
Fetches the full appointment collection once and serves it from memory
"""
import logging
from datetime import timedelta

from clinic_portal.models.appointment import Appointment
from clinic_portal.services.api_client import ApiError
from clinic_portal.utils.calendar_utils import is_same_day

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = 'Unable to fetch appointments. Please ensure the backend server is running.'


def extract_records(body):
    """Accept {'appointments': [...]}, {'data': [...]} or a bare list"""
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ('appointments', 'data'):
            records = body.get(key)
            if isinstance(records, list):
                return records
    return []


class AppointmentSource:
    """In-memory appointment list for one page, replaced only by a new fetch"""

    def __init__(self, client, endpoint='/api/appointments', tz=None):
        """
        Args:
            client: ClinicApiClient (anything with .get(path))
            endpoint: collection path on the clinic API
            tz: display timezone for parsing appointment dates
        """
        self.client = client
        self.endpoint = endpoint
        self.tz = tz
        self.appointments = ()
        self.error = None
        self.loading = False
        self.loaded = False
        self.fetch_count = 0

    def load(self):
        """
        Fetch the whole collection

        Failures leave an empty list and a user-facing error message; they
        are never re-raised and never retried.

        Returns:
            tuple of Appointment
        """
        self.loading = True
        self.error = None
        self.fetch_count += 1
        try:
            body = self.client.get(self.endpoint)
            records = extract_records(body)
            self.appointments = tuple(
                Appointment.from_dict(record, self.tz)
                for record in records
                if isinstance(record, dict)
            )
            unscheduled = sum(1 for a in self.appointments if not a.is_scheduled)
            logger.info(
                "Loaded %d appointments (%d without a usable date)",
                len(self.appointments), unscheduled,
            )
        except ApiError as e:
            logger.error("Error fetching appointments: %s", e)
            self.error = FETCH_ERROR_MESSAGE
            self.appointments = ()
        finally:
            self.loading = False
            self.loaded = True
        return self.appointments

    def refresh(self):
        """Manual re-fetch after a create/update elsewhere on the page"""
        return self.load()

    # ------------------------------------------------------------------
    # Side panel helpers
    # ------------------------------------------------------------------

    def for_date(self, d):
        matched = [a for a in self.appointments if a.is_scheduled and is_same_day(a.start, d)]
        return sorted(matched, key=lambda a: a.start)

    def panel_appointments(self, d, search=None):
        """Appointments on `d` matching the search box, ordered by start"""
        return [a for a in self.for_date(d) if a.matches(search)]

    def today_appointments(self, today):
        return self.for_date(today)

    def upcoming(self, now, window_minutes=30):
        """Appointments starting within [now, now + window], soonest first"""
        horizon = now + timedelta(minutes=window_minutes)
        matched = [a for a in self.appointments if a.is_scheduled and now <= a.start <= horizon]
        return sorted(matched, key=lambda a: a.start)

    def find(self, appointment_id):
        return next((a for a in self.appointments if a.id == str(appointment_id)), None)
