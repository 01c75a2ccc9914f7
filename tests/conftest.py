# tests/conftest.py

import shutil
import pytest
from wanderlust import create_app, db
from config import TestingConfig
from helpers import create_test_user, login


@pytest.fixture(scope='function')
def app():
    """
    Function-scoped test Flask application backed by an in-memory database.
    No application context is held open across requests, so every request
    gets a fresh ``g`` and database session, just like in production.
    """
    app = create_app(TestingConfig)

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
    shutil.rmtree(app.config['UPLOAD_FOLDER'], ignore_errors=True)


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def owner_id(app):
    """ID of a registered user who will own listings in the tests."""
    with app.app_context():
        return create_test_user(username='owner', password='password')


@pytest.fixture(scope='function')
def auth_client(client, owner_id):
    """A test client already logged in as the 'owner' user."""
    login_res = login(client, 'owner', 'password')
    if login_res.status_code != 302:
        pytest.fail("Owner login failed during fixture setup.")
    yield client
