"""
Async database access (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

Record models never touch the pool directly. They receive a `DatabaseHandle`
bound to a single connection for the duration of a request, so a transaction
opened with `BEGIN` runs every statement on that same connection.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator, Sequence
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import config

logger = logging.getLogger(__name__)

TRANSACTION_COMMANDS = frozenset({"BEGIN", "COMMIT", "ROLLBACK"})

_pool: asyncpg.Pool | None = None


class DatabaseHandle(Protocol):
    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        ...


class ConnectionHandle:
    """
    Database handle bound to one asyncpg connection.

    Transaction control is plain statements (`BEGIN`/`COMMIT`/`ROLLBACK`);
    there is no separate transaction object.
    """

    def __init__(self, conn: asyncpg.Connection) -> None:
        self._conn = conn

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        if not params and sql.strip().upper() in TRANSACTION_COMMANDS:
            await self._conn.execute(sql)
            return []
        rows = await self._conn.fetch(sql, *params)
        return [_record_to_dict(r) for r in rows]


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=config.pool_min_size(),
        max_size=config.pool_max_size(),
        command_timeout=config.command_timeout(),
    )
    logger.info("db_pool_ready min_size=%s max_size=%s", config.pool_min_size(), config.pool_max_size())


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def connection() -> AsyncIterator[DatabaseHandle]:
    """
    FastAPI dependency: one pooled connection per request.
    """
    async with pool().acquire() as conn:  # type: asyncpg.Connection
        yield ConnectionHandle(conn)
