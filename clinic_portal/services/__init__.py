from .api_client import (
    ApiError,
    ApiUnauthorized,
    ClinicApiClient,
    create_http_session,
)

from .appointment_source import AppointmentSource, FETCH_ERROR_MESSAGE

from .view_state import CalendarNavigator

from .slot_layout import GridSettings, SlotLayoutEngine, appointment_card

from .appointments_page import AppointmentsPage, PageRegistry, PageNotFound

from .booking_service import (
    BookingValidationError,
    validate_booking,
    book_appointment,
)

__all__ = [
    # Clinic API
    "ApiError",
    "ApiUnauthorized",
    "ClinicApiClient",
    "create_http_session",
    # Data accessor
    "AppointmentSource",
    "FETCH_ERROR_MESSAGE",
    # Navigation and layout
    "CalendarNavigator",
    "GridSettings",
    "SlotLayoutEngine",
    "appointment_card",
    # Pages
    "AppointmentsPage",
    "PageRegistry",
    "PageNotFound",
    # Booking
    "BookingValidationError",
    "validate_booking",
    "book_appointment",
]
