from conftest import OTHER_TENANT_ID, TENANT_ID


def test_healthz_is_public(client):
    resp = client.get("/healthz", tenant_id=None)

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_missing_token_is_unauthorized(client):
    resp = client.get("/api/v1/users", tenant_id=None)

    assert resp.status_code == 401
    assert resp.json()["error"] == {"code": "unauthorized", "message": "bearer token required"}
    assert resp.json()["requestId"]


def test_non_bearer_scheme_is_unauthorized(client):
    resp = client.get("/api/v1/users", headers={"Authorization": "Basic abc"})

    assert resp.status_code == 401


def test_invalid_token_is_unauthorized(client):
    resp = client.get("/api/v1/users", headers={"Authorization": "Bearer not.a.token"})

    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "invalid token"


def test_empty_tenant_is_forbidden_and_handler_does_not_run(client, uow):
    resp = client.post(
        "/api/v1/users",
        tenant_id="",
        json={"name": "N", "email": "n@x.com", "password": "password1", "document": "1"},
    )

    assert resp.status_code == 403
    assert resp.json()["error"] == {"code": "forbidden", "message": "enterprise access required"}
    assert uow.count("users") == 0


def test_me_only_needs_a_token(client):
    resp = client.get("/api/v1/auth/me", tenant_id="")

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == "user-1"
    assert body["email"] == "owner@x.com"
    assert body["enterpriseId"] is None


def test_me_projects_claims(client):
    body = client.get("/api/v1/auth/me").json()

    assert body["enterpriseId"] == TENANT_ID
    assert body["name"] == "Owner"


def test_tenant_comes_from_token_not_body(client, uow):
    resp = client.post(
        "/api/v1/users",
        json={
            "name": "N",
            "email": "n@x.com",
            "password": "password1",
            "document": "1",
            "enterpriseId": OTHER_TENANT_ID,
        },
    )

    assert resp.status_code == 201
    created = uow.store.table("users")[resp.json()["id"]]
    assert created["enterprise_id"] == TENANT_ID
