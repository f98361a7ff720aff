from flask import Blueprint, request, jsonify, current_app

from clinic_portal.extensions import clinic_api, pages
from clinic_portal.models.view_state import Granularity
from clinic_portal.services.appointment_source import AppointmentSource
from clinic_portal.services.appointments_page import AppointmentsPage, PageNotFound
from clinic_portal.services.view_state import CalendarNavigator
import logging

logger = logging.getLogger(__name__)

appointments_bp = Blueprint('appointments', __name__, url_prefix='/appointments')


def _search_term():
    return request.args.get('search', '', type=str).strip()


def _page_not_found(page_id):
    return jsonify({
        'success': False,
        'error': f'Appointments page {page_id} not found or expired. Reload the page.'
    }), 404


def mount_page(granularity=None):
    """Create a page instance and run its single initial fetch"""
    extensions = current_app.extensions
    clock = extensions['clinic_clock']
    navigator = CalendarNavigator(
        clock,
        granularity=granularity or current_app.config.get('DEFAULT_GRANULARITY', 'day'),
    )
    source = AppointmentSource(
        clinic_api,
        endpoint=current_app.config['APPOINTMENTS_ENDPOINT'],
        tz=extensions['display_timezone'],
    )
    page = AppointmentsPage(
        source,
        navigator,
        extensions['slot_layout'],
        clock,
        upcoming_window=current_app.config.get('UPCOMING_WINDOW_MINUTES', 30),
    )
    page.mount()
    return pages.add(page)


@appointments_bp.route('/pages', methods=['POST'])
def create_page():
    """
    Mount an appointments page
    Body (optional): {"granularity": "day" | "week" | "month" | "year"}
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({
            'success': False,
            'error': 'Request body must be a JSON object'
        }), 400
    granularity = data.get('granularity')
    if granularity is not None:
        try:
            granularity = Granularity.parse(granularity)
        except ValueError as e:
            return jsonify({'success': False, 'error': str(e)}), 400

    page = mount_page(granularity)
    logger.info("Mounted appointments page %s (%d appointments)", page.page_id, len(page.source.appointments))
    return jsonify({
        'success': True,
        'data': page.layout(_search_term())
    }), 201


@appointments_bp.route('/pages/<page_id>', methods=['GET'])
def get_page(page_id):
    """
    Current layout of a page
    Query params: search (filters the side panel and day timeline)
    """
    try:
        page = pages.get(page_id)
    except PageNotFound:
        return _page_not_found(page_id)

    return jsonify({
        'success': True,
        'data': page.layout(_search_term())
    }), 200


@appointments_bp.route('/pages/<page_id>/navigate', methods=['POST'])
def navigate(page_id):
    """
    Apply a navigation action
    Body: {"action": "previous" | "next" | "today" | "pick_date" | "jump" |
           "set_granularity" | "pick_month" | "drill_down", ...params}
    """
    try:
        page = pages.get(page_id)
    except PageNotFound:
        return _page_not_found(page_id)

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({
            'success': False,
            'error': 'Request body must be a JSON object'
        }), 400

    action = data.get('action')
    if not action:
        return jsonify({
            'success': False,
            'error': 'action is required'
        }), 400

    params = {k: v for k, v in data.items() if k not in ('action', 'search')}
    try:
        page.navigate(action, **params)
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    return jsonify({
        'success': True,
        'data': page.layout(str(data.get('search') or '').strip() or _search_term())
    }), 200


@appointments_bp.route('/pages/<page_id>/refresh', methods=['POST'])
def refresh_page(page_id):
    """Re-fetch the appointment list (after a booking or edit)"""
    try:
        page = pages.get(page_id)
    except PageNotFound:
        return _page_not_found(page_id)

    page.refresh()
    return jsonify({
        'success': True,
        'data': page.layout(_search_term())
    }), 200


@appointments_bp.route('/pages/<page_id>/panel', methods=['GET'])
def get_panel(page_id):
    """Side-panel appointment list for the focus date"""
    try:
        page = pages.get(page_id)
    except PageNotFound:
        return _page_not_found(page_id)

    return jsonify({
        'success': True,
        'data': page.panel(_search_term())
    }), 200


@appointments_bp.route('/pages/<page_id>', methods=['DELETE'])
def close_page(page_id):
    """Discard a page when the user navigates away"""
    if not pages.discard(page_id):
        return _page_not_found(page_id)
    return jsonify({
        'success': True,
        'message': 'Page closed'
    }), 200
