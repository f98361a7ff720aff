import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Remote clinic API (owns persistence and authentication)
    CLINIC_API_URL = os.getenv('CLINIC_API_URL', 'http://localhost:5000')
    CLINIC_API_TIMEOUT = int(os.getenv('CLINIC_API_TIMEOUT', '15'))  # seconds
    APPOINTMENTS_ENDPOINT = os.getenv('APPOINTMENTS_ENDPOINT', '/api/appointments')
    PATIENTS_ENDPOINT = os.getenv('PATIENTS_ENDPOINT', '/api/patients')

    # Calendar display
    DISPLAY_TIMEZONE = os.getenv('DISPLAY_TIMEZONE', 'Pacific/Auckland')
    DEFAULT_GRANULARITY = os.getenv('DEFAULT_GRANULARITY', 'day')
    DAY_START_HOUR = int(os.getenv('DAY_START_HOUR', '8'))
    DAY_END_HOUR = int(os.getenv('DAY_END_HOUR', '20'))
    SLOT_MINUTES = int(os.getenv('SLOT_MINUTES', '30'))
    SLOT_PIXEL_HEIGHT = int(os.getenv('SLOT_PIXEL_HEIGHT', '60'))  # px per slot
    MIN_BLOCK_HEIGHT = int(os.getenv('MIN_BLOCK_HEIGHT', '20'))
    UPCOMING_WINDOW_MINUTES = int(os.getenv('UPCOMING_WINDOW_MINUTES', '30'))

    # Booking availability window
    BOOKING_START_HOUR = int(os.getenv('BOOKING_START_HOUR', '9'))
    BOOKING_END_HOUR = int(os.getenv('BOOKING_END_HOUR', '17'))

    # Open appointment pages kept in memory
    MAX_OPEN_PAGES = int(os.getenv('MAX_OPEN_PAGES', '256'))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', 'logs/app.log')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    # Security
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')

    @classmethod
    def validate(cls):
        """Refuse to start with the development secret key"""
        if not os.getenv('SECRET_KEY') or cls.SECRET_KEY == 'dev-secret-key-change-in-production':
            raise ValueError("SECRET_KEY environment variable must be set in production and must not be the default value")


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True
    CLINIC_API_URL = 'http://clinic-api.test'
    DISPLAY_TIMEZONE = 'UTC'
    MAX_OPEN_PAGES = 8


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get configuration based on FLASK_ENV"""
    env = os.getenv('FLASK_ENV', 'development')
    return config.get(env, config['default'])
