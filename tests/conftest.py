import uuid
from contextlib import contextmanager

import pytest
from flask_jwt_extended import create_access_token

from charity_api import create_app

TEST_SECRET = "charity-api-test-secret-0123456789abcdef"


class FakeCursor:
    """Stands in for a psycopg2 cursor; model functions are patched, so it only records SQL."""

    def __init__(self):
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append((sql, params))


@contextmanager
def fake_db_cursor():
    yield FakeCursor()


def make_user(**overrides):
    user = {
        "id": str(uuid.uuid4()),
        "name": "Alice Nguyen",
        "email": f"{uuid.uuid4().hex[:8]}@example.com",
        "avatar": None,
        "role": "user",
        "status": "active",
        "reputation": 50,
        "password_hash": None,
        "google_provider": None,
        "facebook_provider": None,
        "created_at": None,
    }
    user.update(overrides)
    return user


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "JWT_SECRET_KEY": TEST_SECRET,
            "LOG_LEVEL": "WARNING",
            "RATE_LIMIT_ENABLED": False,
        }
    )
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def no_db(monkeypatch):
    """Replace `db_cursor` in the given modules with an in-memory no-op transaction."""

    def patch(*modules):
        for module in modules:
            monkeypatch.setattr(module, "db_cursor", fake_db_cursor)

    return patch


@pytest.fixture
def users(monkeypatch):
    """Users known to the auth decorator, keyed by id."""
    registry = {}
    monkeypatch.setattr(
        "charity_api.utils.authz.get_user", lambda user_id: registry.get(str(user_id))
    )
    return registry


@pytest.fixture
def auth_header(app, users):
    def build(user):
        users[user["id"]] = user
        token = create_access_token(
            identity=user["id"], additional_claims={"role": user["role"]}
        )
        return {"Authorization": f"Bearer {token}"}

    return build
