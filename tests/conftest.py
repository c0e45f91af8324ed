import pytest

from retailpos import create_app
from retailpos.config import TestConfig
from retailpos.seed import seed_state
from retailpos.state import PosState


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    app.extensions["retailpos"].shutdown()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def state(app):
    return app.extensions["retailpos"]


@pytest.fixture
def seeded_state():
    """A standalone register with the sample data and no Flask app around it."""
    s = PosState()
    seed_state(s)
    yield s
    s.shutdown()


def login(client, email, password="password"):
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.get_json()
    return {"Authorization": f"Bearer {r.get_json()['data']['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, "admin@pos.com")


@pytest.fixture
def cashier_headers(client):
    return login(client, "cashier@pos.com")
