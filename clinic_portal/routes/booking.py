from flask import Blueprint, request, jsonify, current_app

from clinic_portal.extensions import clinic_api, pages
from clinic_portal.services.api_client import ApiError, ApiUnauthorized
from clinic_portal.services.appointments_page import PageNotFound
from clinic_portal.services.booking_service import (
    APPOINTMENT_TYPES,
    DEFAULT_DURATION,
    DURATION_OPTIONS,
    BookingValidationError,
    book_appointment,
)
import logging

logger = logging.getLogger(__name__)

booking_bp = Blueprint('booking', __name__, url_prefix='/booking')


@booking_bp.route('/slots', methods=['GET'])
def list_slots():
    """Bookable times plus the form's option lists"""
    engine = current_app.extensions['slot_layout']
    return jsonify({
        'success': True,
        'data': {
            'slots': engine.booking_slots(),
            'appointment_types': [{'value': k, 'label': v} for k, v in APPOINTMENT_TYPES.items()],
            'durations': list(DURATION_OPTIONS),
            'default_duration': DEFAULT_DURATION,
            'min_date': current_app.extensions['clinic_clock']().date().isoformat(),
        }
    }), 200


@booking_bp.route('', methods=['POST'])
def create_booking():
    """
    Book an appointment
    Body: {patientId?, patientName, appointmentDate (YYYY-MM-DD),
           appointmentTime (HH:MM), appointmentType, duration?, notes?, pageId?}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({
            'success': False,
            'error': 'Request body must be a JSON object'
        }), 400

    engine = current_app.extensions['slot_layout']
    available_times = {slot['time'] for slot in engine.booking_slots() if slot['available']}
    today = current_app.extensions['clinic_clock']().date()

    try:
        appointment = book_appointment(
            clinic_api,
            data,
            available_times,
            today,
            current_app.extensions['display_timezone'],
            appointments_endpoint=current_app.config['APPOINTMENTS_ENDPOINT'],
            patients_endpoint=current_app.config['PATIENTS_ENDPOINT'],
        )
    except BookingValidationError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    except ApiUnauthorized:
        return jsonify({'success': False, 'error': 'Authentication required'}), 401
    except ApiError as e:
        logger.error("Error creating appointment: %s", e)
        return jsonify({
            'success': False,
            'error': e.message or 'Failed to create appointment. Please try again.'
        }), 502

    # Re-fetch the caller's calendar so the new booking shows up
    page_id = data.get('pageId')
    if page_id:
        try:
            pages.get(page_id).refresh()
        except PageNotFound:
            logger.info("Booking made from unknown page %s; nothing to refresh", page_id)

    return jsonify({
        'success': True,
        'message': 'Appointment booked successfully',
        'data': appointment
    }), 201
