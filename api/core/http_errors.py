"""
Error responder: turns any exception into the JSON error envelope.

    {"error": {"code": "<kind>", "message": "<public message>"}, "requestId": "<id>"}

Only the kind and the outermost kinded message reach the client. Fields and
the cause chain are logged with the request id.
"""

from __future__ import annotations

from http import HTTPStatus

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .errors import AppError, ErrorCode, code_of, find_app_error, message_of
from .logging import get_logger

log = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
REQUEST_ID_HEADER = "X-Request-ID"

ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID: 422,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.INTERNAL: 500,
}

_STATUS_TO_ERROR_CODE: dict[int, ErrorCode] = {
    400: ErrorCode.INVALID,
    **{status: code for code, status in ERROR_CODE_TO_STATUS.items()},
}


def status_for(code: ErrorCode | str) -> int:
    try:
        return ERROR_CODE_TO_STATUS.get(ErrorCode(code), 500)
    except ValueError:
        return 500


def code_for_status(status: int) -> ErrorCode:
    if status in _STATUS_TO_ERROR_CODE:
        return _STATUS_TO_ERROR_CODE[status]
    return ErrorCode.INTERNAL if status >= 500 else ErrorCode.INVALID


def _status_text(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def public_message(err: BaseException | None, status: int) -> str:
    return message_of(err) or _status_text(status)


def request_id_of(request: Request) -> str:
    return str(getattr(request.state, "request_id", "") or "")


class JSONErrorResponse(JSONResponse):
    media_type = JSON_CONTENT_TYPE


def envelope(
    code: ErrorCode,
    message: str,
    request_id: str,
    *,
    status: int,
) -> Response:
    return JSONErrorResponse(
        status_code=status,
        content={
            "error": {"code": code.value, "message": message},
            "requestId": request_id,
        },
        headers={REQUEST_ID_HEADER: request_id} if request_id else None,
    )


def render_error(request: Request, err: BaseException | None, *, status: int | None = None) -> Response:
    """
    Write `err` as an error envelope. `None` writes an empty 204.

    `status` overrides the kind mapping (used for framework errors such as
    405 or a 400 malformed body).
    """
    if err is None:
        return Response(status_code=204)

    code = code_of(err)
    http_status = status if status is not None else status_for(code)
    request_id = request_id_of(request)
    message = public_message(err, http_status)

    found = find_app_error(err)
    event = log.error if http_status >= 500 else log.info
    event(
        "http_error",
        code=code.value,
        status=http_status,
        message=message,
        fields=found.fields if found is not None else {},
        cause=repr(err.__cause__) if err.__cause__ is not None else None,
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )
    return envelope(code, message, request_id, status=http_status)


async def app_error_handler(request: Request, exc: AppError) -> Response:
    return render_error(request, exc)


def _is_malformed_body(exc: RequestValidationError) -> bool:
    for item in exc.errors():
        loc = tuple(item.get("loc") or ())
        if item.get("type") == "json_invalid":
            return True
        # Missing body, or one that decoded to something other than an object.
        if loc == ("body",):
            return True
    return False


async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    if _is_malformed_body(exc):
        err = AppError(ErrorCode.INVALID, "malformed request body")
        err.__cause__ = exc
        return render_error(request, err, status=400)

    details = [
        {"loc": ".".join(str(p) for p in item.get("loc", ())), "msg": item.get("msg"), "type": item.get("type")}
        for item in exc.errors()
    ]
    err = AppError(ErrorCode.INVALID, "invalid request", fields={"errors": details})
    err.__cause__ = exc
    return render_error(request, err)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    code = code_for_status(exc.status_code)
    message = exc.detail if isinstance(exc.detail, str) and exc.detail else _status_text(exc.status_code)
    err = AppError(code, message)
    err.__cause__ = exc
    return render_error(request, err, status=exc.status_code)
