"""
Booking Service for creating appointments through the clinic API
"""
import logging
from datetime import datetime, timezone

from clinic_portal.utils.calendar_utils import parse_date

logger = logging.getLogger(__name__)

APPOINTMENT_TYPES = {
    'consultation': 'Consultation',
    'treatment': 'Treatment',
    'follow-up': 'Follow-up',
    'acupuncture': 'Acupuncture',
    'herbal_medicine': 'Herbal Medicine',
    'tuina': 'Tuina Massage',
    'other': 'Other',
}

DURATION_OPTIONS = (30, 60, 90, 120)
DEFAULT_DURATION = 60


class BookingValidationError(ValueError):
    """Booking form is incomplete or inconsistent"""


def split_patient_name(name):
    """'Mary Jane Smith' -> ('Mary', 'Jane Smith')"""
    parts = (name or '').split()
    if not parts:
        return '', ''
    return parts[0], ' '.join(parts[1:])


def validate_booking(data, available_times, today):
    """
    Check a booking request the way the booking wizard does step by step

    Args:
        data: request body
        available_times: 'HH:MM' strings offered by the availability slots
        today: current local date

    Returns:
        dict: cleaned booking fields

    Raises:
        BookingValidationError
    """
    data = data or {}

    patient_id = str(data.get('patientId') or '').strip()
    patient_name = str(data.get('patientName') or '').strip()
    if not patient_name:
        raise BookingValidationError('Please select or enter a patient name')

    appointment_date = parse_date(data.get('appointmentDate'))
    appointment_time = str(data.get('appointmentTime') or '').strip()
    if appointment_date is None or not appointment_time:
        raise BookingValidationError('Please select a date and time')
    if appointment_date < today:
        raise BookingValidationError('Appointment date cannot be in the past')
    if appointment_time not in available_times:
        raise BookingValidationError(f'Time {appointment_time} is not a bookable slot')

    appointment_type = str(data.get('appointmentType') or '').strip()
    if not appointment_type:
        raise BookingValidationError('Please select an appointment type')
    if appointment_type not in APPOINTMENT_TYPES:
        raise BookingValidationError(f'Unknown appointment type: {appointment_type}')

    try:
        duration = int(data.get('duration') or DEFAULT_DURATION)
    except (TypeError, ValueError):
        raise BookingValidationError('Duration must be a number of minutes')
    if duration not in DURATION_OPTIONS:
        raise BookingValidationError(
            f"Duration must be one of: {', '.join(str(d) for d in DURATION_OPTIONS)} minutes"
        )

    notes = str(data.get('notes') or '').strip()

    return {
        'patient_id': patient_id,
        'patient_name': patient_name,
        'date': appointment_date,
        'time': appointment_time,
        'appointment_type': appointment_type,
        'duration': duration,
        'notes': notes,
    }


def to_utc_iso(local_date, hhmm, tz):
    """Local wall-clock date + 'HH:MM' -> UTC ISO string with 'Z'"""
    hour, minute = (int(part) for part in hhmm.split(':'))
    local = datetime(local_date.year, local_date.month, local_date.day, hour, minute, tzinfo=tz)
    utc = local.astimezone(timezone.utc)
    return utc.strftime('%Y-%m-%dT%H:%M:%S.') + f"{utc.microsecond // 1000:03d}Z"


def build_appointment_payload(booking, tz):
    """API body for POST /api/appointments"""
    payload = {
        'patientId': booking['patient_id'],
        'patientName': booking['patient_name'],
        'appointmentDate': to_utc_iso(booking['date'], booking['time'], tz),
        'appointmentType': booking['appointment_type'],
        'duration': booking['duration'],
        'status': 'scheduled',
    }
    if booking['notes']:
        payload['notes'] = booking['notes']
    return payload


def create_patient(client, patient_name, endpoint='/api/patients'):
    """
    Create a patient from a free-typed name

    Returns:
        tuple: (patient_id, display name)
    """
    first_name, last_name = split_patient_name(patient_name)
    if not first_name:
        raise BookingValidationError('Please enter a valid patient name')

    body = client.post(endpoint, json={'firstName': first_name, 'lastName': last_name}) or {}
    patient = body.get('patient', body) if isinstance(body, dict) else {}
    patient_id = patient.get('_id') or patient.get('id') or ''
    display = f"{patient.get('firstName', first_name)} {patient.get('lastName', last_name)}".strip()
    logger.info("Created patient %s for booking", patient_id)
    return str(patient_id), display


def book_appointment(client, data, available_times, today, tz,
                     appointments_endpoint='/api/appointments', patients_endpoint='/api/patients'):
    """
    Validate and submit a booking

    A patient record is created first when only a new name was typed.

    Returns:
        dict: the API's response body (the created appointment)

    Raises:
        BookingValidationError: invalid form
        ApiError: clinic API failure
    """
    booking = validate_booking(data, available_times, today)

    if not booking['patient_id']:
        booking['patient_id'], booking['patient_name'] = create_patient(
            client, booking['patient_name'], endpoint=patients_endpoint
        )

    payload = build_appointment_payload(booking, tz)
    body = client.post(appointments_endpoint, json=payload)
    logger.info(
        "Booked %s for %s at %s",
        booking['appointment_type'], booking['patient_name'], payload['appointmentDate'],
    )
    if isinstance(body, dict):
        return body.get('appointment', body)
    return payload
