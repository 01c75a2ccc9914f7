# tests/test_core.py

import pytest
from config import TestingConfig, ConfigurationError
from sqlalchemy.exc import OperationalError
from wanderlust import create_app
from wanderlust.errors import InfrastructureError, AppError, NotFoundError
from wanderlust.middleware import MethodOverrideMiddleware
from helpers import redirect_path


def test_app_exists(app):
    """ Test if the Flask app fixture loads correctly. """
    assert app is not None
    assert app.config['TESTING'] is True


def test_root_redirects_to_listings(client):
    response = client.get('/')
    assert response.status_code == 302
    assert redirect_path(response) == '/listings'


def test_listings_index_loads(client, app):
    response = client.get('/listings')
    assert response.status_code == 200
    assert b"All Listings" in response.data
    site_name = app.config.get('SITE_NAME', 'Wanderlust')
    assert bytes(site_name, 'utf-8') in response.data


def test_unmatched_path_renders_404_page(client):
    response = client.get('/no/such/page')
    assert response.status_code == 404
    assert b"Page Not Found!" in response.data


def test_unexpected_error_does_not_leak_details(app, client):
    @app.route('/boom')
    def boom():
        raise RuntimeError('driver said: password=hunter2')

    response = client.get('/boom')
    assert response.status_code == 500
    assert b"Something Went Wrong" in response.data
    assert b"hunter2" not in response.data
    assert b"Traceback" not in response.data


def test_infrastructure_error_renders_generic_message(app, client):
    @app.route('/db-down')
    def db_down():
        raise InfrastructureError() from OperationalError('SELECT 1', {}, Exception('connection refused'))

    response = client.get('/db-down')
    assert response.status_code == 500
    assert b"Something Went Wrong" in response.data
    assert b"connection refused" not in response.data


def test_error_variants_carry_status_and_message():
    default = AppError()
    assert (default.status_code, default.message) == (500, 'Something Went Wrong')
    custom = NotFoundError('Listing you requested for does not exist!')
    assert custom.status_code == 404
    assert custom.message == 'Listing you requested for does not exist!'


def test_unsupported_method_is_rendered_as_error_page(client):
    response = client.post('/listings/1')
    assert response.status_code == 405
    assert b"Error 405" in response.data


# --- Startup hardening ---

def test_create_app_requires_secret_key():
    class NoSecretConfig(TestingConfig):
        SECRET_KEY = None

    with pytest.raises(ConfigurationError) as excinfo:
        create_app(NoSecretConfig)
    assert 'SECRET_KEY' in str(excinfo.value)


def test_create_app_requires_database_url():
    class NoDatabaseConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = None

    with pytest.raises(ConfigurationError) as excinfo:
        create_app(NoDatabaseConfig)
    assert 'SQLALCHEMY_DATABASE_URI' in str(excinfo.value)


def test_create_app_fails_fast_when_database_unreachable(tmp_path):
    class UnreachableDatabaseConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = 'sqlite:///' + str(tmp_path / 'missing-dir' / 'app.db')

    with pytest.raises(InfrastructureError):
        create_app(UnreachableDatabaseConfig)


# --- Method override ---

def _run_middleware(method, query_string):
    seen = {}

    def inner_app(environ, start_response):
        seen['method'] = environ['REQUEST_METHOD']
        start_response('200 OK', [])
        return [b'']

    middleware = MethodOverrideMiddleware(inner_app)
    middleware({'REQUEST_METHOD': method, 'QUERY_STRING': query_string, 'PATH_INFO': '/listings/1'}, lambda *args: None)
    return seen['method']


def test_method_override_tunnels_delete_through_post():
    assert _run_middleware('POST', '_method=DELETE') == 'DELETE'
    assert _run_middleware('POST', '_method=put') == 'PUT'


def test_method_override_ignores_get_and_unknown_methods():
    assert _run_middleware('GET', '_method=DELETE') == 'GET'
    assert _run_middleware('POST', '_method=TRACE') == 'POST'
    assert _run_middleware('POST', '') == 'POST'
