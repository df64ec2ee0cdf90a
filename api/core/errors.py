"""
Application error taxonomy.

Every failure that crosses a component boundary is an `AppError` carrying a
kind (`ErrorCode`). The HTTP layer maps kinds to status codes; nothing else
about an error is visible to clients.

Usage:
    raise AppError(ErrorCode.NOT_FOUND, "species not found")

    try:
        ...
    except jwt.InvalidTokenError as exc:
        raise wrap(exc, ErrorCode.UNAUTHORIZED, "invalid token") from exc
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping


class ErrorCode(str, Enum):
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"


class AppError(Exception):
    """
    Kinded application error.

    `fields` holds private diagnostic detail. It is logged, never rendered.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message
        self.fields: dict[str, Any] = dict(fields or {})

    def __str__(self) -> str:
        cause = self.__cause__
        if cause is None:
            return f"{self.code.value}: {self.message}"
        return f"{self.code.value}: {self.message}: {cause}"

    def __repr__(self) -> str:
        return f"AppError(code={self.code.value!r}, message={self.message!r}, fields={self.fields!r})"


def wrap(err: BaseException, code: ErrorCode, message: str) -> AppError:
    """
    Build a new AppError whose cause is `err`.

    Callers still `raise ... from err`; setting `__cause__` here keeps the chain
    intact when the error is returned instead of raised.
    """
    out = AppError(code, message)
    out.__cause__ = err
    return out


def with_fields(err: BaseException, fields: Mapping[str, Any]) -> AppError:
    """
    Return a copy of `err` with `fields` merged in. The original is untouched.

    A non-AppError is wrapped as `internal` with the fields attached.
    """
    if isinstance(err, AppError):
        merged = {**err.fields, **fields}
        out = AppError(err.code, err.message, fields=merged)
        out.__cause__ = err.__cause__
        return out

    out = wrap(err, ErrorCode.INTERNAL, "internal error")
    out.fields.update(fields)
    return out


def _chain(err: BaseException | None):
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__ or err.__context__


def find_app_error(err: BaseException | None) -> AppError | None:
    for item in _chain(err):
        if isinstance(item, AppError):
            return item
    return None


def code_of(err: BaseException | None) -> ErrorCode:
    """Kind of the outermost AppError in the chain, `internal` when there is none."""
    found = find_app_error(err)
    return found.code if found is not None else ErrorCode.INTERNAL


def message_of(err: BaseException | None) -> str | None:
    found = find_app_error(err)
    if found is None or not found.message:
        return None
    return found.message


def invalid(message: str, **fields: Any) -> AppError:
    return AppError(ErrorCode.INVALID, message, fields=fields)


def not_found(message: str, **fields: Any) -> AppError:
    return AppError(ErrorCode.NOT_FOUND, message, fields=fields)


def conflict(message: str, **fields: Any) -> AppError:
    return AppError(ErrorCode.CONFLICT, message, fields=fields)


def forbidden(message: str, **fields: Any) -> AppError:
    return AppError(ErrorCode.FORBIDDEN, message, fields=fields)


def unauthorized(message: str, **fields: Any) -> AppError:
    return AppError(ErrorCode.UNAUTHORIZED, message, fields=fields)
