"""Shared fixtures: a fixed clock, a canned clinic API and the Flask test client."""
import json
from datetime import datetime, timezone
from urllib.parse import urlsplit

import pytest
import requests

from clinic_portal import create_app
from clinic_portal.extensions import clinic_api, pages
from clinic_portal.models import Appointment

# Friday 15 March 2024, quarter to nine
FIXED_NOW = datetime(2024, 3, 15, 8, 45)

SAMPLE_APPOINTMENTS = [
    {
        '_id': 'a1',
        'patientName': 'John Smith',
        'patientEmail': 'john@example.com',
        'appointmentDate': '2024-03-15T09:00:00Z',
        'duration': 60,
        'status': 'confirmed',
    },
    {
        '_id': 'a2',
        'patientName': 'Jane Doe',
        'patientEmail': 'jane@example.com',
        'appointmentDate': '2024-03-15T13:30:00Z',
        'duration': 30,
        'status': 'pending',
    },
    {
        '_id': 'a3',
        'patientName': 'Ana Ruiz',
        'appointmentDate': '2024-03-20T10:00:00Z',
        'duration': 90,
        'status': 'completed',
        'notes': 'Smithfield referral',
    },
    {
        '_id': 'a4',
        'patientName': 'No Date',
        'status': 'scheduled',
    },
]


def make_response(status_code=200, body=None, raw=None):
    """Real requests.Response carrying a JSON (or raw) body."""
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw
    elif body is None:
        response._content = b''
    else:
        response._content = json.dumps(body).encode('utf-8')
    response.headers['Content-Type'] = 'application/json'
    return response


def make_appointment(appointment_id, start, duration=60, **fields):
    """Appointment from API-shaped fields, parsed as UTC."""
    data = {'_id': appointment_id, 'duration': duration, **fields}
    if start is not None:
        data['appointmentDate'] = start
    return Appointment.from_dict(data, timezone.utc)


class FakeClinicApi:
    """
    Stand-in for requests.Session.request

    Responses are registered per (method, path); unregistered paths answer 404.
    Every call is recorded for assertions.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, body=None, status_code=200, error=None):
        self.routes[(method.upper(), path)] = (status_code, body, error)

    def calls_to(self, method, path):
        return [c for c in self.calls if c['method'] == method and c['path'] == path]

    def __call__(self, method, url, headers=None, **kwargs):
        path = urlsplit(url).path
        self.calls.append({
            'method': method,
            'path': path,
            'headers': dict(headers or {}),
            'json': kwargs.get('json'),
            'timeout': kwargs.get('timeout'),
        })
        entry = self.routes.get((method.upper(), path))
        if entry is None:
            return make_response(404, {'message': 'Not found'})
        status_code, body, error = entry
        if error is not None:
            raise error
        return make_response(status_code, body)


@pytest.fixture
def fake_api(monkeypatch):
    """Canned clinic API behind the shared client's session."""
    fake = FakeClinicApi()
    monkeypatch.setattr(clinic_api.session, 'request', fake)
    return fake


@pytest.fixture
def app(fake_api):
    pages.clear()
    application = create_app('testing', clock=lambda: FIXED_NOW)
    yield application
    pages.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def with_appointments(fake_api):
    """Clinic API serving the sample appointment list."""
    fake_api.add('GET', '/api/appointments', {'appointments': SAMPLE_APPOINTMENTS})
    return fake_api


@pytest.fixture
def mounted_page(client, with_appointments):
    """Id of a freshly mounted day-view page."""
    response = client.post('/appointments/pages', json={'granularity': 'day'})
    assert response.status_code == 201
    return response.get_json()['data']['page_id']
