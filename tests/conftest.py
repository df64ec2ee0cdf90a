import pathlib
import sys

import bcrypt
import pytest
from fastapi.testclient import TestClient

ROOT = pathlib.Path(__file__).resolve().parents[1]
for path in (ROOT / "api", ROOT / "tests"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from auth.security import TokenService
from core.config import Settings
from fakes import InMemoryUnitOfWork
from main import create_app

JWT_SECRET = "jwt_test_secret"
JWT_ISSUER = "test-issuer"
JWT_AUDIENCE = "test-audience"

TENANT_ID = "ent-1"
OTHER_TENANT_ID = "ent-2"


def hash_password(password: str) -> str:
    # Low cost keeps the suite fast.
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


def make_settings(**overrides) -> Settings:
    values = {
        "jwt_secret": JWT_SECRET,
        "jwt_issuer": JWT_ISSUER,
        "jwt_audience": JWT_AUDIENCE,
        "bcrypt_cost": 4,
        "log_level": "warn",
    }
    values.update(overrides)
    return Settings(**values)


class AuthenticatedClient:
    def __init__(self, client: TestClient, tokens: TokenService):
        self._client = client
        self._tokens = tokens

    def token_for(self, *, user_id: str = "user-1", tenant_id: str = TENANT_ID, email: str = "owner@x.com") -> str:
        return self._tokens.mint({"id": user_id, "email": email, "name": "Owner", "enterprise_id": tenant_id})

    def request(self, method: str, url: str, *, tenant_id: str | None = TENANT_ID, **kwargs):
        headers = dict(kwargs.pop("headers", {}) or {})
        if tenant_id is not None and "Authorization" not in headers:
            headers["Authorization"] = f"Bearer {self.token_for(tenant_id=tenant_id)}"
        return self._client.request(method, url, headers=headers, **kwargs)

    def __getattr__(self, name: str):
        return getattr(self._client, name)

    def get(self, url: str, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs):
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs):
        return self.request("PUT", url, **kwargs)

    def delete(self, url: str, **kwargs):
        return self.request("DELETE", url, **kwargs)


@pytest.fixture
def uow() -> InMemoryUnitOfWork:
    store = InMemoryUnitOfWork()
    store.add_enterprise(TENANT_ID)
    store.add_enterprise(OTHER_TENANT_ID, name="Other")
    store.add_project("P1", enterprise_id=TENANT_ID, title="Reforestation")
    store.add_project("P2", enterprise_id=OTHER_TENANT_ID, title="Other project")
    store.add_species("sp-1", "Handroanthus albus")
    store.add_species("sp-2", "Cedrela fissilis", family="Meliaceae")
    for feature_id, name in (("f-1", "Logs"), ("f-2", "Product"), ("f-3", "Project"), ("f-4", "User")):
        store.add_feature(feature_id, name)
    return store


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret=JWT_SECRET, issuer=JWT_ISSUER, audience=JWT_AUDIENCE, access_ttl_min=15)


@pytest.fixture
def app(uow: InMemoryUnitOfWork, tokens: TokenService):
    return create_app(make_settings(), uow=uow, token_service=tokens)


@pytest.fixture
def client(app, tokens: TokenService):
    with TestClient(app) as base:
        yield AuthenticatedClient(base, tokens)
