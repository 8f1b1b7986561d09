from datetime import timedelta

import pytest

from api import create_app
from models.user import User
from utils.lockout import utcnow
from utils.security import hash_password


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    app.extensions["storage"].engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def issuer(app):
    return app.extensions["token_issuer"]


def create_user(app, username, password, email=None, role="user", **fields):
    """Insert a user straight into storage and return its id."""
    with app.app_context():
        storage = app.extensions["storage"]
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=hash_password(password),
            role=role,
            **fields,
        )
        storage.new(user)
        storage.save()
        return user.id


def fetch_user(app, username):
    """Load a detached snapshot of the user row."""
    with app.app_context():
        return app.extensions["storage"].get_user_by_username(username)


def backdate_lock(app, username, minutes):
    """Pretend the account was locked `minutes` ago."""
    with app.app_context():
        storage = app.extensions["storage"]
        user = storage.get_user_by_username(username)
        user.locked_time = utcnow() - timedelta(minutes=minutes)
        storage.new(user)
        storage.save()


def login(client, username, password):
    return client.post("/login", json={"username": username, "password": password})


def set_cookie_headers(response):
    """Map cookie name -> raw Set-Cookie header for one response."""
    headers = {}
    for header in response.headers.getlist("Set-Cookie"):
        name = header.split("=", 1)[0]
        headers[name] = header
    return headers


def cookie_value(header):
    return header.split(";", 1)[0].split("=", 1)[1]
