from flask import has_request_context, session

from clinic_portal.services.api_client import ClinicApiClient
from clinic_portal.services.appointments_page import PageRegistry

TOKEN_SESSION_KEY = 'api_token'


def session_token():
    """Bearer token of the signed-in user, kept in the Flask session"""
    if not has_request_context():
        return None
    return session.get(TOKEN_SESSION_KEY)


def clear_session_token():
    if has_request_context():
        session.pop(TOKEN_SESSION_KEY, None)


# Shared instances, bound to the app in create_app()
clinic_api = ClinicApiClient(token_provider=session_token, on_unauthorized=clear_session_token)
pages = PageRegistry()
