import pytest

from auth import security
from conftest import auth_header, register

NOT_AUTHORIZED = {"success": False, "error": "Not authorized to access this route."}

BOOTCAMP = {"name": "Guarded Camp", "description": "d", "address": "1 Main St"}


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": ""},
        {"Authorization": "Bearer"},
        {"Authorization": "Token abc"},
        {"Authorization": "Bearer not-a-token"},
    ],
)
def test_missing_or_malformed_token_is_401(client, headers):
    res = client.get("/api/v1/auth/me", headers=headers)

    assert res.status_code == 401
    assert res.json() == NOT_AUTHORIZED


def test_expired_token_gets_the_same_401(client, monkeypatch):
    token = register(client, "late@example.com")
    monkeypatch.setenv("JWT_EXPIRE_MIN", "1")
    expired = security.build_access_token(user_id=1, now=security.now_epoch_s() - 120)

    assert client.get("/api/v1/auth/me", headers=auth_header(token)).status_code == 200
    res = client.get("/api/v1/auth/me", headers=auth_header(expired))
    assert res.status_code == 401
    assert res.json() == NOT_AUTHORIZED


def test_token_for_deleted_user_is_401(client, admin_token):
    token = register(client, "gone@example.com")
    me = client.get("/api/v1/auth/me", headers=auth_header(token)).json()["data"]

    res = client.delete(f"/api/v1/users/{me['id']}", headers=auth_header(admin_token))
    assert res.status_code == 200, res.text

    assert client.get("/api/v1/auth/me", headers=auth_header(token)).json() == NOT_AUTHORIZED


def test_valid_token_with_wrong_role_is_403(client, user_token):
    res = client.post("/api/v1/bootcamps", json=BOOTCAMP, headers=auth_header(user_token))

    assert res.status_code == 403
    assert res.json() == {"success": False, "error": "Role user is not authorized to access this route."}


def test_invalid_token_with_role_requirement_is_401_not_403(client):
    res = client.post("/api/v1/bootcamps", json=BOOTCAMP, headers=auth_header("garbage"))

    assert res.status_code == 401
    assert res.json() == NOT_AUTHORIZED


def test_allowed_role_passes(client, publisher_token):
    res = client.post("/api/v1/bootcamps", json=BOOTCAMP, headers=auth_header(publisher_token))

    assert res.status_code == 201, res.text


def test_users_resource_is_admin_only(client, publisher_token, admin_token):
    assert client.get("/api/v1/users").status_code == 401
    assert client.get("/api/v1/users", headers=auth_header(publisher_token)).status_code == 403

    res = client.get("/api/v1/users", headers=auth_header(admin_token))
    assert res.status_code == 200
    assert res.json()["count"] == 2


def test_health_reports_store_status(client):
    res = client.get("/health")

    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
