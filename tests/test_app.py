"""Tests for the app factory, health checks and error envelope."""
import pytest
import requests

from clinic_portal import create_app
from clinic_portal.config import ProductionConfig
from clinic_portal.services.slot_layout import SlotLayoutEngine


class TestFactory:

    def test_extensions_wired(self, app):
        assert app.testing is True
        assert isinstance(app.extensions['slot_layout'], SlotLayoutEngine)
        assert app.extensions['clinic_clock']().isoformat() == '2024-03-15T08:45:00'
        assert app.extensions['clinic_api'].base_url == 'http://clinic-api.test'
        assert app.extensions['clinic_api'].timeout == 15

    def test_production_requires_secret_key(self, monkeypatch):
        monkeypatch.delenv('SECRET_KEY', raising=False)
        with pytest.raises(ValueError):
            ProductionConfig.validate()

    def test_production_refuses_to_start_without_secret(self, monkeypatch, fake_api):
        monkeypatch.delenv('SECRET_KEY', raising=False)
        with pytest.raises(ValueError):
            create_app('production')

    def test_unknown_endpoint_envelope(self, client):
        response = client.get('/nowhere')
        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': 'Endpoint not found'}

    def test_method_not_allowed(self, client):
        assert client.put('/booking/slots').status_code == 405


class TestHealth:

    def test_ping(self, client, mounted_page):
        body = client.get('/health/ping').get_json()
        assert body['status'] == 'healthy'
        assert body['open_pages'] == 1

    def test_live(self, client):
        assert client.get('/health/live').get_json()['status'] == 'alive'

    def test_ready_when_api_answers(self, client, fake_api):
        fake_api.add('GET', '/health', {'status': 'healthy'})
        response = client.get('/health/ready')
        assert response.status_code == 200
        assert response.get_json()['clinic_api'] == 'connected'

    def test_not_ready_when_api_down(self, client, fake_api):
        fake_api.add('GET', '/health', error=requests.exceptions.ConnectionError('refused'))
        response = client.get('/health/ready')
        assert response.status_code == 503
        assert response.get_json()['status'] == 'not_ready'
