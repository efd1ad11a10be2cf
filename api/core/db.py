"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. `main.create_app()` opens it in the lifespan,
hands it to the repositories, and closes it on shutdown. Each helper call acquires
one pooled connection for a single autocommit statement and releases it afterwards,
whether the statement succeeded or not.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .config import Settings
from .errors import StorageError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS comentarios (
    id SERIAL PRIMARY KEY,
    nombre VARCHAR(100) NOT NULL,
    comentario TEXT NOT NULL,
    fecha TIMESTAMP NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS referencias (
    id SERIAL PRIMARY KEY,
    nombre VARCHAR(100) NOT NULL,
    titulo TEXT NOT NULL,
    correo TEXT NOT NULL,
    carta TEXT NOT NULL,
    fecha TIMESTAMP NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS comentarios_fecha_idx ON comentarios (fecha DESC);
CREATE INDEX IF NOT EXISTS referencias_fecha_idx ON referencias (fecha DESC);
"""

_STORAGE_FAILURES = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _ssl_context() -> ssl.SSLContext:
    # Hosted Postgres providers commonly present chains we cannot verify.
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def connect_kwargs(settings: Settings) -> dict[str, Any]:
    """
    Build asyncpg connection arguments from settings.

    `DATABASE_URL` wins over the individual `DB_*` parts when it is set.
    """
    kwargs: dict[str, Any] = {"ssl": _ssl_context() if settings.is_production else False}
    if settings.database_url:
        kwargs["dsn"] = _sanitize_database_url(settings.database_url)
    else:
        kwargs.update(
            host=settings.db_host,
            port=settings.db_port,
            database=settings.db_name,
            user=settings.db_user,
            password=settings.db_password,
        )
    return kwargs


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    """
    One asyncpg pool per process.

    When the store is unreachable at startup the pool stays unset and every call
    retries creating it, so the process keeps serving and `/api/health` can report
    the failure.
    """

    def __init__(self, pool: asyncpg.Pool | None = None, *, settings: Settings | None = None) -> None:
        self._pool = pool
        self._settings = settings
        self._pool_lock = asyncio.Lock()

    @classmethod
    async def connect(cls, settings: Settings) -> "Database":
        database = cls(settings=settings)
        try:
            await database._get_pool()
        except StorageError:
            logger.warning("db_unavailable_at_startup host=%s; will retry on first query", settings.db_host)
        return database

    async def _create_pool(self) -> asyncpg.Pool:
        settings = self._settings
        if settings is None:
            raise StorageError("DB pool is not initialized.")
        try:
            pool = await asyncpg.create_pool(
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                command_timeout=settings.db_command_timeout,
                **connect_kwargs(settings),
            )
        except _STORAGE_FAILURES as exc:
            logger.error("db_connect_failed host=%s error=%s", settings.db_host, exc)
            raise StorageError(f"No se pudo conectar a la base de datos: {exc}") from exc
        logger.info("db_pool_ready min_size=%s max_size=%s", settings.db_pool_min_size, settings.db_pool_max_size)
        return pool

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            async with self._pool_lock:
                if self._pool is None:
                    self._pool = await self._create_pool()
        return self._pool

    @property
    def connected(self) -> bool:
        return self._pool is not None

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    async def apply_schema(self) -> None:
        await self.execute(SCHEMA_SQL)

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        pool = await self._get_pool()
        try:
            row = await pool.fetchrow(sql, *args)
        except _STORAGE_FAILURES as exc:
            raise StorageError(str(exc)) from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        pool = await self._get_pool()
        try:
            rows = await pool.fetch(sql, *args)
        except _STORAGE_FAILURES as exc:
            raise StorageError(str(exc)) from exc
        return [_record_to_dict(r) for r in rows]

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        pool = await self._get_pool()
        try:
            return await pool.fetchval(sql, *args)
        except _STORAGE_FAILURES as exc:
            raise StorageError(str(exc)) from exc

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
        """
        pool = await self._get_pool()
        try:
            await pool.execute(sql, *args)
        except _STORAGE_FAILURES as exc:
            raise StorageError(str(exc)) from exc
