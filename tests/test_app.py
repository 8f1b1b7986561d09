"""App factory, configuration, error envelope and CLI."""
import pytest

from api import create_app
from api.config import (
    DEV_ACCESS_SECRET,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
    validate_config,
)
from models.user import User
from utils.security import verify_password

from tests.conftest import fetch_user


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_root(client):
    body = client.get("/").get_json()
    assert body["docs"] == "/apidocs/"


def test_swagger_spec_lists_routes(client):
    spec = client.get("/swagger.json").get_json()
    assert "/login" in spec["paths"]
    assert "/deleteUser/{user_id}" in spec["paths"]


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.get_json()["error"] == "NOT_FOUND"


def test_wrong_method(client):
    response = client.get("/login")
    assert response.status_code == 405


def test_cors_allows_credentials_for_configured_origin(client):
    response = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert response.headers.get("Access-Control-Allow-Origin") == "http://localhost:5173"
    assert response.headers.get("Access-Control-Allow-Credentials") == "true"


def test_unhandled_errors_are_opaque(app):
    @app.get("/boom")
    def boom():
        raise RuntimeError("secret detail")

    response = app.test_client().get("/boom")
    assert response.status_code == 500
    body = response.get_json()
    assert body["error"] == "INTERNAL_ERROR"
    assert "secret detail" not in response.get_data(as_text=True)


class TestConfig:
    @pytest.mark.parametrize(
        "name, expected",
        [("prod", ProductionConfig), ("production", ProductionConfig),
         ("test", TestingConfig), ("dev", DevelopmentConfig)],
    )
    def test_get_config(self, name, expected):
        assert get_config(name) is expected

    def test_production_refuses_dev_secrets(self):
        with pytest.raises(RuntimeError):
            create_app("prod", DATABASE_URL="sqlite://", ACCESS_TOKEN_SECRET_KEY=DEV_ACCESS_SECRET)

    def test_production_with_real_secrets(self):
        validate_config({
            "DEBUG": False,
            "TESTING": False,
            "ACCESS_TOKEN_SECRET_KEY": "a" * 32,
            "REFRESH_TOKEN_SECRET_KEY": "r" * 32,
        })

    def test_overrides_reach_collaborators(self):
        app = create_app("testing", LOGIN_MAX_ATTEMPTS=5, LOCKOUT_MINUTES=30)
        policy = app.extensions["lockout_policy"]
        assert (policy.max_attempts, policy.lock_minutes) == (5, 30)


class TestCreateUserCommand:
    def test_creates_admin(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "create-user", "--username", "root", "--email", "Root@Example.com",
            "--password", "rootpw", "--role", "admin",
        ])
        assert result.exit_code == 0, result.output
        user = fetch_user(app, "root")
        assert user.role == "admin"
        assert user.email == "root@example.com"
        assert verify_password("rootpw", user.password_hash)

    def test_rejects_unknown_role(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "create-user", "--username", "x", "--email", "x@example.com",
            "--password", "pw", "--role", "superuser",
        ])
        assert result.exit_code != 0
        assert fetch_user(app, "x") is None

    def test_rejects_duplicate(self, app):
        runner = app.test_cli_runner()
        args = ["create-user", "--username", "x", "--email", "x@example.com", "--password", "pw"]
        assert runner.invoke(args=args).exit_code == 0
        assert runner.invoke(args=args).exit_code != 0


def test_storage_helpers_and_user_dict(app, client):
    client.post("/register", json={"username": "al", "email": "a@x.com", "password": "p1"})
    with app.app_context():
        storage = app.extensions["storage"]
        assert storage.count(User) == 1
        assert storage.count() == 1
        user = storage.get_user_by_username("al")
        assert storage.get(User, user.id) is user
        assert list(storage.all(User)) == [f"User.{user.id}"]
        assert storage.all() == storage.all(User)

        user.email = "changed@x.com"
        storage.rollback()
        assert storage.get_user_by_email("changed@x.com") is None
        assert storage.get_user_by_email("a@x.com") is user
        as_dict = user.to_dict()
        assert as_dict["username"] == "al"
        assert as_dict["__class__"] == "User"
        assert "password_hash" not in as_dict
        assert "p1" not in str(user)
        with pytest.raises(AttributeError):
            user.password


def test_create_user_rejects_duplicate_email(app):
    runner = app.test_cli_runner()
    first = ["create-user", "--username", "x", "--email", "x@example.com", "--password", "pw"]
    second = ["create-user", "--username", "y", "--email", "X@Example.com", "--password", "pw"]
    assert runner.invoke(args=first).exit_code == 0
    result = runner.invoke(args=second)
    assert result.exit_code != 0
    assert "already registered" in result.output
    assert fetch_user(app, "y") is None
