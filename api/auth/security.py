"""
Auth security helpers: access tokens (PyJWT, HS256) and password hashing (bcrypt).
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

import bcrypt
import jwt

from core.errors import AppError, ErrorCode

JWT_ALGORITHM = "HS256"

_REQUIRED_CLAIMS = ["sub", "iss", "aud", "iat", "nbf", "exp"]

# bcrypt only reads the first 72 bytes and newer releases refuse longer input.
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class Claims:
    sub: str
    email: str
    name: str
    tenant_id: str
    role_id: str | None = None


def now_epoch_s() -> int:
    return int(time.time())


class TokenService:
    """
    Mints and verifies access tokens.

    Secret, issuer, audience and TTL are fixed at construction. `clock`
    returns epoch seconds and is only consulted when minting; verification
    uses PyJWT's own clock.
    """

    def __init__(
        self,
        *,
        secret: str,
        issuer: str,
        audience: str,
        access_ttl_min: int = 15,
        clock: Callable[[], int] = now_epoch_s,
    ) -> None:
        if not secret:
            raise ValueError("token secret is empty")
        self._secret = secret
        self._issuer = issuer
        self._audience = audience
        self._ttl_s = int(access_ttl_min) * 60
        self._clock = clock

    @property
    def access_ttl_seconds(self) -> int:
        return self._ttl_s

    def mint(self, user: dict[str, Any]) -> str:
        issued_at = int(self._clock())
        payload: dict[str, Any] = {
            "sub": str(user["id"]),
            "iss": self._issuer,
            "aud": self._audience,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": issued_at + self._ttl_s,
            "email": str(user.get("email") or ""),
            "name": str(user.get("name") or ""),
            "tenant_id": str(user.get("enterprise_id") or ""),
        }
        if user.get("role_id"):
            payload["role_id"] = str(user["role_id"])
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def parse(self, token: str) -> Claims:
        raw = (token or "").strip()
        if not raw:
            raise AppError(ErrorCode.UNAUTHORIZED, "invalid token", fields={"reason": "empty"})

        try:
            payload = jwt.decode(
                raw,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.InvalidTokenError as exc:
            raise AppError(
                ErrorCode.UNAUTHORIZED,
                "invalid token",
                fields={"reason": type(exc).__name__},
            ) from exc

        subject = str(payload.get("sub") or "").strip()
        if not subject:
            raise AppError(ErrorCode.UNAUTHORIZED, "invalid token", fields={"reason": "subject"})

        role_id = payload.get("role_id")
        return Claims(
            sub=subject,
            email=str(payload.get("email") or ""),
            name=str(payload.get("name") or ""),
            tenant_id=str(payload.get("tenant_id") or ""),
            role_id=str(role_id) if role_id else None,
        )


class PasswordHasher:
    def __init__(self, cost: int = 12) -> None:
        # bcrypt accepts 4..31 rounds.
        self._cost = max(4, min(31, int(cost)))

    def hash(self, plain_password: str) -> str:
        password = (plain_password or "").encode("utf-8")
        if not password:
            raise AppError(ErrorCode.INVALID, "password is empty")
        if len(password) > MAX_PASSWORD_BYTES:
            raise AppError(
                ErrorCode.INVALID,
                "password is too long",
                fields={"max_bytes": MAX_PASSWORD_BYTES},
            )
        return bcrypt.hashpw(password, bcrypt.gensalt(rounds=self._cost)).decode("utf-8")

    def compare(self, password_hash: str, plain_password: str) -> bool:
        password = (plain_password or "").encode("utf-8")
        hashed = (password_hash or "").encode("utf-8")
        if not password or not hashed:
            return False
        try:
            return bcrypt.checkpw(password, hashed)
        except ValueError:
            return False
