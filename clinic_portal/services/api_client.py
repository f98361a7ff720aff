"""
HTTP client for the remote clinic API

Pattern: one shared requests.Session with connection pooling, bearer token
injection and a default timeout. Requests are not retried.
"""
import logging

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Remote API call failed (network error, bad status or bad body)"""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ApiUnauthorized(ApiError):
    """Remote API rejected the bearer token (HTTP 401)"""


def create_http_session(pool_size=10):
    """
    Create HTTP session with connection pooling and JSON headers

    Args:
        pool_size: connections kept per host

    Returns:
        requests.Session
    """
    session = requests.Session()
    adapter = HTTPAdapter(
        max_retries=0,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({
        'Content-Type': 'application/json',
        'Accept': 'application/json',
    })
    return session


class ClinicApiClient:
    """
    Thin wrapper around the clinic REST API

    Usable as a Flask extension (`init_app`) or standalone with explicit
    arguments.
    """

    def __init__(self, app=None, base_url=None, timeout=15, token_provider=None,
                 on_unauthorized=None, session=None):
        """
        Args:
            base_url: API root, e.g. 'http://localhost:5000'
            timeout: seconds per request
            token_provider: callable returning the bearer token or None
            on_unauthorized: callable invoked when the API answers 401
            session: requests.Session to reuse (a pooled one is created otherwise)
        """
        self.base_url = (base_url or '').rstrip('/')
        self.timeout = timeout
        self.token_provider = token_provider
        self.on_unauthorized = on_unauthorized
        self.session = session or create_http_session()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.base_url = app.config['CLINIC_API_URL'].rstrip('/')
        self.timeout = app.config.get('CLINIC_API_TIMEOUT', self.timeout)
        app.extensions['clinic_api'] = self

    # ------------------------------------------------------------------

    def get(self, path, **kwargs):
        return self.request('GET', path, **kwargs)

    def post(self, path, json=None, **kwargs):
        return self.request('POST', path, json=json, **kwargs)

    def put(self, path, json=None, **kwargs):
        return self.request('PUT', path, json=json, **kwargs)

    def request(self, method, path, token=None, notify_unauthorized=True, **kwargs):
        """
        Make an API call and return the decoded JSON body

        Args:
            method: HTTP method
            path: endpoint path, e.g. '/api/appointments'
            token: bearer token overriding the token provider
            notify_unauthorized: run on_unauthorized on a 401 (off for
                probes that must not touch the caller's session)

        Returns:
            Decoded JSON (dict or list), or None for an empty body

        Raises:
            ApiUnauthorized: on HTTP 401
            ApiError: on any other failure
        """
        url = f"{self.base_url}{path}"
        headers = dict(kwargs.pop('headers', None) or {})
        bearer = token if token is not None else self._current_token()
        if bearer:
            headers['Authorization'] = f"Bearer {bearer}"
        kwargs.setdefault('timeout', self.timeout)

        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ApiError(f"Request to clinic API failed: {e}") from e

        if response.status_code == 401:
            logger.warning("%s %s rejected with 401", method, url)
            if notify_unauthorized and self.on_unauthorized is not None:
                self.on_unauthorized()
            raise ApiUnauthorized("Authentication required", status_code=401, payload=self._safe_json(response))

        if response.status_code >= 400:
            payload = self._safe_json(response)
            message = None
            if isinstance(payload, dict):
                message = payload.get('message') or payload.get('error')
            logger.error("%s %s returned %s", method, url, response.status_code)
            raise ApiError(
                message or f"Clinic API returned HTTP {response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError("Clinic API returned a non-JSON body", status_code=response.status_code) from e

    def _current_token(self):
        if self.token_provider is None:
            return None
        return self.token_provider()

    @staticmethod
    def _safe_json(response):
        try:
            return response.json()
        except ValueError:
            return None
