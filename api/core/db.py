"""
Async database access helpers (raw SQL) using asyncpg.

This module builds the connection pool from `Settings` and offers small query
helpers. The pool is owned by the unit of work (`core/uow.py`), which FastAPI
opens on startup and closes on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Every helper takes an executor: either the pool (autocommit, one connection
per statement) or a connection inside an open transaction.
"""

from __future__ import annotations

import asyncio
from typing import Any, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .config import Settings
from .logging import get_logger

log = get_logger(__name__)

Executor = Union[asyncpg.Pool, asyncpg.Connection]


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url(settings: Settings) -> str:
    url = (settings.db_dsn or "").strip()
    if not url:
        raise RuntimeError("DB_DSN (or DATABASE_URL) is not set.")
    return _sanitize_database_url(url)


async def create_pool(settings: Settings) -> asyncpg.Pool:
    """
    Open the pool and ping it once.

    asyncpg has no max-lifetime knob; idle connections are recycled through
    `max_inactive_connection_lifetime` and the statement timeout stays below
    the request deadline.
    """
    max_size = max(1, settings.db_max_open_conns)
    pool = await asyncpg.create_pool(
        dsn=database_url(settings),
        min_size=min(settings.db_max_idle_conns, max_size),
        max_size=max_size,
        max_inactive_connection_lifetime=settings.db_conn_max_idle_ms / 1000.0,
        command_timeout=settings.request_timeout_s,
    )
    try:
        await ping(pool, timeout=settings.db_ping_timeout_s)
    except BaseException:
        await pool.close()
        raise

    log.info("db_pool_ready", max_size=max_size, min_size=min(settings.db_max_idle_conns, max_size))
    return pool


async def ping(pool: asyncpg.Pool, *, timeout: float = 5.0) -> None:
    await asyncio.wait_for(pool.fetchval("SELECT 1"), timeout=timeout)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(executor: Executor, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await executor.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(executor: Executor, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await executor.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(executor: Executor, sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE). Returns the command status tag.
    """
    return await executor.execute(sql, *args)


def affected_rows(status: str) -> int:
    # asyncpg returns tags like "DELETE 1" / "UPDATE 0".
    try:
        return int((status or "").rsplit(" ", 1)[-1])
    except ValueError:
        return 0
