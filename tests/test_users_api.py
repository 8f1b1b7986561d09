"""API tests for the admin-only user endpoints."""
from utils.tokens import Identity

from tests.conftest import create_user, fetch_user, login


def login_admin(client, app):
    create_user(app, "root", "rootpw", role="admin")
    assert login(client, "root", "rootpw").status_code == 200


class TestGetDataUser:
    def test_admin_gets_public_fields_only(self, client, app):
        create_user(app, "al", "p1", email="a@x.com")
        login_admin(client, app)

        response = client.get("/getDataUser")
        assert response.status_code == 200
        rows = response.get_json()["data"]
        assert [row["username"] for row in rows] == ["al", "root"]
        for row in rows:
            assert set(row) == {"id", "username", "email", "role"}
        assert rows[0]["email"] == "a@x.com"

    def test_non_admin_is_rejected_like_anonymous(self, client, app):
        create_user(app, "al", "p1")
        login(client, "al", "p1")
        as_user = client.get("/getDataUser")

        anonymous = app.test_client().get("/getDataUser")

        assert as_user.status_code == 401
        assert anonymous.status_code == 401
        assert as_user.get_json() == anonymous.get_json()

    def test_refresh_cookie_is_not_accepted(self, client, app, issuer):
        pair = issuer.issue_pair(Identity("root", "admin"))
        client.set_cookie("refreshToken", pair.refresh_token)
        assert client.get("/getDataUser").status_code == 401

    def test_invalid_access_cookie(self, client):
        client.set_cookie("accessToken", "garbage")
        assert client.get("/getDataUser").status_code == 401


class TestDeleteUser:
    def test_admin_deletes_user(self, client, app):
        user_id = create_user(app, "al", "p1")
        login_admin(client, app)

        response = client.delete(f"/deleteUser/{user_id}")
        assert response.status_code == 200
        assert fetch_user(app, "al") is None

    def test_unknown_id(self, client, app):
        login_admin(client, app)
        response = client.delete("/deleteUser/does-not-exist")
        assert response.status_code == 404
        assert response.get_json()["error"] == "NOT_FOUND"

    def test_requires_authentication(self, client, app):
        user_id = create_user(app, "al", "p1")
        response = client.delete(f"/deleteUser/{user_id}")
        assert response.status_code == 401
        assert fetch_user(app, "al") is not None

    def test_requires_admin_role(self, client, app):
        user_id = create_user(app, "al", "p1")
        create_user(app, "bob", "p2")
        login(client, "bob", "p2")
        response = client.delete(f"/deleteUser/{user_id}")
        assert response.status_code == 401
        assert fetch_user(app, "al") is not None
