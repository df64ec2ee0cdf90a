import pytest

from conftest import TENANT_ID, hash_password


@pytest.fixture
def seeded(uow):
    uow.add_user("u-1", email="a@x.com", password_hash=hash_password("p"), enterprise_id=TENANT_ID, name="Ana")
    return uow


def test_login_success(client, seeded, tokens):
    resp = client.post("/api/v1/auth/login", tenant_id=None, json={"email": "a@x.com", "password": "p"})

    assert resp.status_code == 200
    body = resp.json()
    assert isinstance(body["accessToken"], str) and body["accessToken"]
    assert body["expiresIn"] == 900

    claims = tokens.parse(body["accessToken"])
    assert claims.sub == "u-1"
    assert claims.tenant_id == TENANT_ID


def test_login_email_is_case_insensitive(client, seeded):
    resp = client.post("/api/v1/auth/login", tenant_id=None, json={"email": " A@X.com ", "password": "p"})

    assert resp.status_code == 200


def test_login_wrong_password(client, seeded):
    resp = client.post("/api/v1/auth/login", tenant_id=None, json={"email": "a@x.com", "password": "q"})

    assert resp.status_code == 401
    assert resp.json()["error"] == {"code": "unauthorized", "message": "invalid credentials"}


def test_login_unknown_email(client, seeded):
    resp = client.post("/api/v1/auth/login", tenant_id=None, json={"email": "nobody@x.com", "password": "p"})

    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "invalid credentials"


@pytest.mark.parametrize("body", ["{not json", "[1, 2, 3]", ""])
def test_login_malformed_body(client, seeded, body):
    resp = client.post(
        "/api/v1/auth/login",
        tenant_id=None,
        content=body,
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "invalid"


def test_login_missing_field_is_invalid(client, seeded):
    resp = client.post("/api/v1/auth/login", tenant_id=None, json={"email": "a@x.com"})

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "invalid"


def test_login_then_call_protected_route(client, seeded):
    token = client.post(
        "/api/v1/auth/login", tenant_id=None, json={"email": "a@x.com", "password": "p"}
    ).json()["accessToken"]

    resp = client.get("/api/v1/users", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 200
    assert [u["email"] for u in resp.json()["items"]] == ["a@x.com"]
