from flask import Blueprint, request, jsonify, session

from clinic_portal.extensions import clinic_api, TOKEN_SESSION_KEY
from clinic_portal.services.api_client import ApiError, ApiUnauthorized
import logging

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


@auth_bp.route('/login', methods=['POST'])
def login():
    """Sign in against the clinic API and keep its token in the session"""
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or not data:
        return jsonify({
            'success': False,
            'error': 'Request body must be a JSON object'
        }), 400

    email = data.get('email')
    password = data.get('password')

    if not email or not password:
        return jsonify({
            'success': False,
            'error': 'Email and password required'
        }), 400

    try:
        body = clinic_api.post('/api/auth/login', json={'email': email, 'password': password}, token='') or {}
    except ApiUnauthorized:
        return jsonify({
            'success': False,
            'error': 'Invalid email or password'
        }), 401
    except ApiError as e:
        logger.warning("Login failed: %s", e)
        return jsonify({
            'success': False,
            'error': e.message or 'Login failed'
        }), 502 if e.status_code is None else e.status_code

    token = body.get('token')
    if not token:
        return jsonify({
            'success': False,
            'error': 'Login failed'
        }), 502

    session[TOKEN_SESSION_KEY] = token
    return jsonify({
        'success': True,
        'user': body.get('user')
    }), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.pop(TOKEN_SESSION_KEY, None)
    return jsonify({
        'success': True,
        'message': 'Logged out'
    }), 200


@auth_bp.route('/me', methods=['GET'])
def me():
    """Current user as reported by the clinic API"""
    if not session.get(TOKEN_SESSION_KEY):
        return jsonify({
            'success': False,
            'error': 'Authentication required'
        }), 401

    try:
        body = clinic_api.get('/api/auth/me') or {}
    except ApiUnauthorized:
        return jsonify({
            'success': False,
            'error': 'Authentication required'
        }), 401
    except ApiError as e:
        return jsonify({
            'success': False,
            'error': e.message
        }), 502

    return jsonify({
        'success': True,
        'user': body.get('user')
    }), 200
