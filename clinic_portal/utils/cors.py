"""
CORS Configuration
Centralized CORS settings for the application
"""
import os

# Browser origins allowed to call the portal (comma separated, '*' for any)
CORS_CONFIG = {
    "origins": [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()],
    "methods": ["GET", "POST", "DELETE", "OPTIONS"],
    "allow_headers": [
        "Content-Type",
        "Authorization",
        "X-Requested-With",
        "Accept",
        "Origin",
    ],
    "expose_headers": [
        "Content-Type",
    ],
    "supports_credentials": True,
    "max_age": 86400,  # 24 hours
}


def init_cors(app):
    """
    Initialize CORS for the Flask application
    """
    from flask_cors import CORS

    CORS(app,
         resources={r"/*": {"origins": CORS_CONFIG["origins"]}},
         methods=CORS_CONFIG["methods"],
         allow_headers=CORS_CONFIG["allow_headers"],
         expose_headers=CORS_CONFIG["expose_headers"],
         supports_credentials=CORS_CONFIG["supports_credentials"],
         max_age=CORS_CONFIG["max_age"])

    app.logger.info("CORS enabled for origins: %s", ', '.join(CORS_CONFIG["origins"]))
