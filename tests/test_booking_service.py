"""Tests for booking validation and submission."""
from datetime import date, timedelta, timezone

import pytest

from clinic_portal.services.api_client import ApiError
from clinic_portal.services.booking_service import (
    BookingValidationError,
    book_appointment,
    build_appointment_payload,
    split_patient_name,
    to_utc_iso,
    validate_booking,
)

TODAY = date(2024, 3, 15)
AVAILABLE = {'09:00', '09:30', '10:00', '16:30'}


def booking_form(**overrides):
    form = {
        'patientId': 'p-1',
        'patientName': 'John Smith',
        'appointmentDate': '2024-03-16',
        'appointmentTime': '10:00',
        'appointmentType': 'consultation',
    }
    form.update(overrides)
    return form


class RecordingClient:
    """Records posts and replies with canned bodies per path."""

    def __init__(self, replies):
        self.replies = replies
        self.posts = []

    def post(self, path, json=None, **kwargs):
        self.posts.append((path, json))
        reply = self.replies[path]
        if isinstance(reply, Exception):
            raise reply
        return reply


class TestValidation:

    def test_valid_form(self):
        booking = validate_booking(booking_form(notes='  first visit '), AVAILABLE, TODAY)
        assert booking['date'] == date(2024, 3, 16)
        assert booking['duration'] == 60
        assert booking['notes'] == 'first visit'

    @pytest.mark.parametrize('overrides,message', [
        ({'patientName': '  '}, 'Please select or enter a patient name'),
        ({'appointmentDate': ''}, 'Please select a date and time'),
        ({'appointmentTime': None}, 'Please select a date and time'),
        ({'appointmentDate': '2024-03-14'}, 'Appointment date cannot be in the past'),
        ({'appointmentTime': '12:15'}, 'Time 12:15 is not a bookable slot'),
        ({'appointmentType': ''}, 'Please select an appointment type'),
        ({'appointmentType': 'surgery'}, 'Unknown appointment type: surgery'),
        ({'duration': 45}, 'Duration must be one of: 30, 60, 90, 120 minutes'),
        ({'duration': 'long'}, 'Duration must be a number of minutes'),
    ])
    def test_rejections(self, overrides, message):
        with pytest.raises(BookingValidationError) as exc_info:
            validate_booking(booking_form(**overrides), AVAILABLE, TODAY)
        assert str(exc_info.value) == message

    def test_today_is_bookable(self):
        booking = validate_booking(booking_form(appointmentDate=TODAY.isoformat()), AVAILABLE, TODAY)
        assert booking['date'] == TODAY


class TestPayload:

    def test_utc_conversion(self):
        nzdt = timezone(timedelta(hours=13))
        assert to_utc_iso(date(2024, 3, 15), '09:00', nzdt) == '2024-03-14T20:00:00.000Z'
        assert to_utc_iso(date(2024, 3, 15), '09:30', timezone.utc) == '2024-03-15T09:30:00.000Z'

    def test_payload_fields(self):
        booking = validate_booking(booking_form(duration='90'), AVAILABLE, TODAY)
        payload = build_appointment_payload(booking, timezone.utc)
        assert payload == {
            'patientId': 'p-1',
            'patientName': 'John Smith',
            'appointmentDate': '2024-03-16T10:00:00.000Z',
            'appointmentType': 'consultation',
            'duration': 90,
            'status': 'scheduled',
        }

    def test_split_patient_name(self):
        assert split_patient_name('Mary Jane Smith') == ('Mary', 'Jane Smith')
        assert split_patient_name('Cher') == ('Cher', '')
        assert split_patient_name('  ') == ('', '')


class TestBookAppointment:

    def test_existing_patient(self):
        client = RecordingClient({'/api/appointments': {'appointment': {'_id': 'new-1'}}})
        created = book_appointment(client, booking_form(), AVAILABLE, TODAY, timezone.utc)

        assert created == {'_id': 'new-1'}
        assert [path for path, _ in client.posts] == ['/api/appointments']

    def test_new_patient_created_first(self):
        client = RecordingClient({
            '/api/patients': {'patient': {'_id': 'p-9', 'firstName': 'Mary', 'lastName': 'Jane Smith'}},
            '/api/appointments': {'_id': 'new-2'},
        })
        book_appointment(client, booking_form(patientId='', patientName='Mary Jane Smith'), AVAILABLE, TODAY, timezone.utc)

        (patients_path, patient_body), (appointments_path, payload) = client.posts
        assert patients_path == '/api/patients'
        assert patient_body == {'firstName': 'Mary', 'lastName': 'Jane Smith'}
        assert appointments_path == '/api/appointments'
        assert payload['patientId'] == 'p-9'
        assert payload['patientName'] == 'Mary Jane Smith'

    def test_invalid_form_never_calls_api(self):
        client = RecordingClient({})
        with pytest.raises(BookingValidationError):
            book_appointment(client, booking_form(patientName=''), AVAILABLE, TODAY, timezone.utc)
        assert client.posts == []

    def test_api_failure_propagates(self):
        client = RecordingClient({'/api/appointments': ApiError('Slot already taken', status_code=409)})
        with pytest.raises(ApiError):
            book_appointment(client, booking_form(), AVAILABLE, TODAY, timezone.utc)
