import itertools
import pytest
from fieldops import create_app

TEST_CONFIG = {
    'TESTING': True,
    'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
    'JWT_SECRET_KEY': 'fieldops-test-secret-key-0123456789abcdef',
}


def make_clock():
    """Deterministic, strictly increasing timestamps in the production format."""
    ticks = itertools.count(1)
    return lambda: f'2024-01-01T00:00:00.{next(ticks):06d}Z'


@pytest.fixture()
def app():
    return create_app(dict(TEST_CONFIG), clock=make_clock())


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def workspace(app):
    return app.extensions['fieldops']


@pytest.fixture()
def developer(workspace):
    return workspace.users.ensure_developer('Dev', 'dev@example.com')


@pytest.fixture()
def manager(workspace, developer):
    return workspace.users.create_user(developer, {'name': 'Mia', 'email': 'mia@example.com', 'role': 'manager'})


@pytest.fixture()
def employee(workspace, developer):
    return workspace.users.create_user(developer, {'name': 'Eli', 'email': 'eli@example.com', 'role': 'employee'})


@pytest.fixture()
def login(client):
    """Return a callable producing Authorization headers for an e-mail."""
    def _login(email):
        resp = client.post('/auth/login', json={'email': email})
        assert resp.status_code == 200, resp.get_json()
        return {'Authorization': f"Bearer {resp.get_json()['access_token']}"}
    return _login
