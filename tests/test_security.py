import pytest

from auth.security import PasswordHasher, TokenService
from core.errors import AppError, ErrorCode

USER = {"id": "u-1", "email": "a@x.com", "name": "Ana", "enterprise_id": "ent-1", "role_id": "role-9"}


def _service(secret: str = "k1", **kwargs) -> TokenService:
    return TokenService(secret=secret, issuer="iss", audience="aud", **kwargs)


def test_token_round_trip_preserves_claims():
    tokens = _service()
    claims = tokens.parse(tokens.mint(USER))

    assert claims.sub == "u-1"
    assert claims.email == "a@x.com"
    assert claims.name == "Ana"
    assert claims.tenant_id == "ent-1"
    assert claims.role_id == "role-9"


def test_token_without_role_or_tenant():
    tokens = _service()
    claims = tokens.parse(tokens.mint({"id": "u-2", "email": "b@x.com", "name": "Bea"}))

    assert claims.tenant_id == ""
    assert claims.role_id is None


def test_token_signed_with_another_key_is_rejected():
    token = _service("k1").mint(USER)

    with pytest.raises(AppError) as info:
        _service("k2").parse(token)
    assert info.value.code == ErrorCode.UNAUTHORIZED


def test_expired_token_is_rejected():
    issued_long_ago = lambda: 1_000_000  # noqa: E731
    tokens = _service(access_ttl_min=1, clock=issued_long_ago)

    with pytest.raises(AppError) as info:
        tokens.parse(tokens.mint(USER))
    assert info.value.code == ErrorCode.UNAUTHORIZED


def test_wrong_audience_is_rejected():
    token = TokenService(secret="k1", issuer="iss", audience="someone-else").mint(USER)

    with pytest.raises(AppError):
        _service().parse(token)


@pytest.mark.parametrize("token", ["", "   ", "not-a-jwt", "a.b.c"])
def test_garbage_tokens_are_rejected(token):
    with pytest.raises(AppError) as info:
        _service().parse(token)
    assert info.value.code == ErrorCode.UNAUTHORIZED


def test_ttl_is_exposed_in_seconds():
    assert _service(access_ttl_min=15).access_ttl_seconds == 900


def test_hash_compare():
    hasher = PasswordHasher(cost=4)
    hashed = hasher.hash("p")

    assert hashed != "p"
    assert hasher.compare(hashed, "p")
    assert not hasher.compare(hashed, "q")


def test_hash_is_salted():
    hasher = PasswordHasher(cost=4)
    assert hasher.hash("same") != hasher.hash("same")


def test_compare_with_malformed_hash_is_false():
    assert not PasswordHasher(cost=4).compare("not-a-bcrypt-hash", "p")


def test_hash_rejects_empty_secret():
    with pytest.raises(AppError) as info:
        PasswordHasher(cost=4).hash("")
    assert info.value.code == ErrorCode.INVALID


def test_hash_rejects_passwords_over_72_bytes():
    hasher = PasswordHasher(cost=4)

    # 40 characters, 80 bytes in UTF-8.
    with pytest.raises(AppError) as info:
        hasher.hash("é" * 40)

    assert info.value.code == ErrorCode.INVALID
    assert info.value.message == "password is too long"


def test_hash_accepts_exactly_72_bytes():
    hasher = PasswordHasher(cost=4)
    password = "é" * 36

    assert hasher.compare(hasher.hash(password), password)
