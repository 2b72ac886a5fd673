"""
Shared test fixtures.

Every test gets a fresh app on an in-memory SQLite database (TestConfig),
with tables created and roles seeded by create_app. Service-level tests use
`app_ctx`; HTTP tests use `client` plus the `login` helper, which returns
headers carrying the CSRF token issued at login.
"""
from datetime import datetime

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.court import Court
from models.user import User, Role
from security.password import hash_password

# Fixed "now" for service tests; scenario dates below are all after it.
NOW = datetime(2025, 5, 20, 12, 0)

PASSWORD = "correct-horse-1"


def make_user(email, roles=("PLAYER",), password=PASSWORD):
    user = User(email=email, password_hash=hash_password(password))
    user.roles = Role.query.filter(Role.name.in_(roles)).all()
    db.session.add(user)
    db.session.commit()
    return user


def make_court(name="Court C", capacity=8, price_per_hour=800, **kwargs):
    court = Court(name=name, capacity=capacity, price_per_hour=price_per_hour, **kwargs)
    db.session.add(court)
    db.session.commit()
    return court


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def player(app_ctx):
    return make_user("player@example.com")


@pytest.fixture()
def other_player(app_ctx):
    return make_user("other@example.com")


@pytest.fixture()
def admin(app_ctx):
    return make_user("admin@example.com", roles=("ADMIN",))


@pytest.fixture()
def court(app_ctx):
    return make_court()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def login(client):
    def _login(email, password=PASSWORD):
        resp = client.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return {"X-CSRF-Token": client.get_cookie("csrf_token").value}
    return _login
