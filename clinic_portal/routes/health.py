"""
Health check endpoints for monitoring and load balancers
"""
from flask import Blueprint, jsonify
from datetime import datetime, timezone

from clinic_portal.extensions import clinic_api, pages
from clinic_portal.services.api_client import ApiError, ApiUnauthorized

health_bp = Blueprint('health', __name__, url_prefix='/health')


def _timestamp():
    return datetime.now(timezone.utc).isoformat()


@health_bp.route('', methods=['GET'])
@health_bp.route('/ping', methods=['GET'])
def health_check():
    """Basic health check - no clinic API call"""
    return jsonify({
        'status': 'healthy',
        'timestamp': _timestamp(),
        'service': 'clinic-portal',
        'open_pages': len(pages)
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    """Readiness check - includes clinic API reachability"""
    try:
        clinic_api.get('/health', token='', notify_unauthorized=False)
        api_status = 'connected'
    except ApiUnauthorized:
        # Reachable, just protected
        api_status = 'connected'
    except ApiError as e:
        if e.status_code is not None and e.status_code < 500:
            api_status = 'connected'
        else:
            api_status = f'error: {e.message}'

    return jsonify({
        'status': 'ready' if api_status == 'connected' else 'not_ready',
        'clinic_api': api_status,
        'timestamp': _timestamp()
    }), 200 if api_status == 'connected' else 503


@health_bp.route('/live', methods=['GET'])
def liveness_check():
    """Liveness check for Kubernetes/containers"""
    return jsonify({
        'status': 'alive',
        'timestamp': _timestamp()
    }), 200
