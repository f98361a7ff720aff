"""
WSGI entry point for the clinic portal (appointments calendar service)
Used by Gunicorn, uWSGI, and other WSGI servers:

    gunicorn wsgi:application
"""
from clinic_portal import create_app

# Config class picked from FLASK_ENV
application = app = create_app()

if __name__ == '__main__':
    # For development only
    application.run(debug=True)
