from flask import Flask, jsonify
from .extensions import clinic_api, pages
from .services.slot_layout import GridSettings, SlotLayoutEngine
from .utils.calendar_utils import get_timezone, system_clock
import logging
import os

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config_name=None, clock=None):
    """
    Create Flask application factory

    Args:
        config_name: 'development', 'production' or 'testing' (default: FLASK_ENV)
        clock: callable returning the current local datetime; defaults to the
            system clock in DISPLAY_TIMEZONE
    """
    app = Flask(__name__)

    # Load configuration
    from clinic_portal.config import config, get_config
    config_class = config.get(config_name, config['default']) if config_name else get_config()
    if hasattr(config_class, 'validate'):
        config_class.validate()
    app.config.from_object(config_class)

    logging.getLogger().setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Calendar dependencies
    display_tz = get_timezone(app.config.get('DISPLAY_TIMEZONE'))
    app.extensions['display_timezone'] = display_tz
    app.extensions['clinic_clock'] = clock or system_clock(display_tz)
    app.extensions['slot_layout'] = SlotLayoutEngine(GridSettings.from_config(app.config))

    # Initialize extensions
    clinic_api.init_app(app)
    pages.init_app(app)

    # Initialize CORS
    from clinic_portal.utils.cors import init_cors
    init_cors(app)

    from clinic_portal.middleware import setup_middleware
    setup_middleware(app)

    # Global error handlers
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': 'Endpoint not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': 'Method not allowed'
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal Server Error: {error}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Internal server error. Check server logs for details.'
        }), 500

    @app.errorhandler(Exception)
    def handle_exception(e):
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': f'An error occurred: {str(e)}'
        }), 500

    # Setup file logging
    if not app.debug and not app.testing:
        from logging.handlers import RotatingFileHandler

        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10240000,
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Clinic portal startup')

    # Register blueprints
    from .routes import auth_bp, appointments_bp, booking_bp, health_bp
    app.register_blueprint(health_bp)  # Register health check first
    app.register_blueprint(auth_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(booking_bp)

    logger.info("Clinic API: %s (timezone %s)", app.config['CLINIC_API_URL'], app.config.get('DISPLAY_TIMEZONE'))
    return app
