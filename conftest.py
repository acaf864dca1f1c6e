# conftest.py
import pytest
from flask_jwt_extended import create_access_token

from carelog import create_app
from carelog.models.user import DEMO_GUEST_UID
from carelog.testing.fake_firestore import FakeFirestore


@pytest.fixture
def fake_store():
    return FakeFirestore()


@pytest.fixture
def app(fake_store):
    return create_app('testing', store_factory=fake_store.client)


@pytest.fixture
def production_app(fake_store):
    return create_app('testing', store_factory=fake_store.client, config_overrides={'APP_MODE': 'production'})


@pytest.fixture
def client(app):
    return app.test_client()


def _auth_headers(app, identity):
    with app.app_context():
        token = create_access_token(identity=identity)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(app):
    return _auth_headers(app, DEMO_GUEST_UID)


@pytest.fixture
def production_auth_headers(production_app):
    return _auth_headers(production_app, 'staff-uid-1')
