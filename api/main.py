from __future__ import annotations

import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth import router as auth_router
from auth.security import PasswordHasher, TokenService
from core import http_errors
from core.config import ConfigError, Settings, load_settings
from core.errors import AppError
from core.logging import configure_logging, get_logger
from core.middleware import RecoveryMiddleware, RequestIDMiddleware, TimeoutMiddleware
from core.uow import PostgresUnitOfWork, UnitOfWork
from enterprises import router as enterprises_router
from phytoanalysis import router as phytoanalysis_router
from species import router as species_router
from specimens import router as specimens_router
from users import router as users_router

log = get_logger(__name__)

API_PREFIX = "/api/v1"


def create_app(
    settings: Settings | None = None,
    *,
    uow: UnitOfWork | None = None,
    token_service: TokenService | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level, settings.log_format)

    uow = uow or PostgresUnitOfWork(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # Open (and ping) the DB pool once per process.
        await uow.connect()
        log.info("app_started", app=settings.app_name, env=settings.app_env, port=settings.http_port)
        try:
            yield
        finally:
            await uow.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.state.settings = settings
    app.state.uow = uow
    app.state.token_service = token_service or TokenService(
        secret=settings.jwt_secret,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        access_ttl_min=settings.jwt_access_ttl_min,
    )
    app.state.password_hasher = PasswordHasher(cost=settings.bcrypt_cost)

    # Last added runs first: CORS, request id, recovery, deadline.
    app.add_middleware(TimeoutMiddleware, timeout_s=settings.request_timeout_s)
    app.add_middleware(RecoveryMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[http_errors.REQUEST_ID_HEADER],
    )

    app.add_exception_handler(AppError, http_errors.app_error_handler)
    app.add_exception_handler(RequestValidationError, http_errors.validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_errors.http_exception_handler)

    api = APIRouter(prefix=API_PREFIX)
    api.include_router(auth_router.router, tags=["auth"])
    api.include_router(users_router.router, tags=["users"])
    api.include_router(enterprises_router.router, tags=["enterprises"])
    api.include_router(species_router.router, tags=["species"])
    api.include_router(specimens_router.router, tags=["specimens"])
    api.include_router(phytoanalysis_router.router, tags=["phyto-analyses"])
    app.include_router(api)

    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok"}

    return app


def run() -> None:
    try:
        settings = load_settings()
    except ConfigError as exc:
        configure_logging()
        log.error("config_invalid", error=str(exc))
        sys.exit(1)

    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=settings.http_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
