"""
Unit of work: several repository calls sharing one database transaction.

Usage:
    async def _write(repos: Repos) -> str:
        analysis_id = await repos.phyto_analyses().create(...)
        await repos.specimens().create(...)
        return analysis_id

    analysis_id = await uow.run_in_tx(_write)

Any exception raised by the callback (cancellation included) rolls the
transaction back and propagates unchanged. The raw connection never leaves
this module; callbacks only see repositories bound to it.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Awaitable, Callable, Protocol, TypeVar

import asyncpg

from addresses.repository import AddressRepository
from enterprises.repository import EnterpriseRepository
from phytoanalysis.repository import PhytoAnalysisRepository
from roles.repository import RoleRepository
from species.repository import SpeciesRepository
from specimens.repository import SpecimenRepository
from users.repository import UserRepository

from . import db
from .config import Settings
from .errors import AppError, ErrorCode
from .logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

_in_tx: ContextVar[bool] = ContextVar("uow_in_tx", default=False)


class Repos:
    """Repository handles bound to one executor (a pool or a transaction's connection)."""

    def __init__(self, executor: db.Executor) -> None:
        self._executor = executor

    def users(self) -> UserRepository:
        return UserRepository(self._executor)

    def enterprises(self) -> EnterpriseRepository:
        return EnterpriseRepository(self._executor)

    def addresses(self) -> AddressRepository:
        return AddressRepository(self._executor)

    def roles(self) -> RoleRepository:
        return RoleRepository(self._executor)

    def species(self) -> SpeciesRepository:
        return SpeciesRepository(self._executor)

    def specimens(self) -> SpecimenRepository:
        return SpecimenRepository(self._executor)

    def phyto_analyses(self) -> PhytoAnalysisRepository:
        return PhytoAnalysisRepository(self._executor)


class UnitOfWork(Protocol):
    """What the app and its services need from a unit of work."""

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def ping(self) -> None: ...

    def repos(self) -> Repos: ...

    async def run_in_tx(self, fn: Callable[[Repos], Awaitable[T]]) -> T: ...


class PostgresUnitOfWork:
    def __init__(self, settings: Settings, *, pool: asyncpg.Pool | None = None) -> None:
        self._settings = settings
        self._pool = pool

    async def connect(self) -> None:
        if self._pool is not None:
            return None
        self._pool = await db.create_pool(self._settings)

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call connect() on startup.")
        return self._pool

    async def ping(self) -> None:
        await db.ping(self.pool(), timeout=self._settings.db_ping_timeout_s)

    def repos(self) -> Repos:
        """Pool-bound repositories for reads that need no transaction."""
        return Repos(self.pool())

    async def run_in_tx(self, fn: Callable[[Repos], Awaitable[T]]) -> T:
        if _in_tx.get():
            raise AppError(ErrorCode.INTERNAL, "nested unit of work is not supported")

        token = _in_tx.set(True)
        try:
            async with self.pool().acquire() as conn:  # type: asyncpg.Connection
                tx = conn.transaction()
                await tx.start()
                try:
                    result = await fn(Repos(conn))
                except BaseException as exc:
                    await _rollback(tx, exc)
                    raise
                await tx.commit()
                return result
        finally:
            _in_tx.reset(token)


async def _rollback(tx: Any, cause: BaseException) -> None:
    try:
        await tx.rollback()
    except Exception:
        # The original failure is what the caller needs to see.
        log.exception("rollback_failed", cause=repr(cause))
