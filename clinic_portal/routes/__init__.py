from .auth import auth_bp
from .appointments import appointments_bp
from .booking import booking_bp
from .health import health_bp

__all__ = ['auth_bp', 'appointments_bp', 'booking_bp', 'health_bp']
