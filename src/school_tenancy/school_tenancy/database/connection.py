from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

import psycopg2
from sqlalchemy import event
from sqlalchemy import exc as sa_exc
from sqlalchemy.pool import QueuePool

from ..core.constants import (
    DEFAULT_CONNECTION_TIMEOUT_MS,
    DEFAULT_IDLE_TIMEOUT_MS,
    DEFAULT_POOL_MAX,
    DEFAULT_STATEMENT_TIMEOUT_MS,
)
from ..core.exceptions import FatalPoolError, PoolTimeoutError, ValidationError

logger = logging.getLogger(__name__)

_HOSTED_MARKERS = ("supabase", "amazonaws.com")


@dataclass(frozen=True)
class DBConfig:
    dsn: str
    max_connections: int = DEFAULT_POOL_MAX
    idle_timeout_ms: int = DEFAULT_IDLE_TIMEOUT_MS
    connection_timeout_ms: int = DEFAULT_CONNECTION_TIMEOUT_MS
    statement_timeout_ms: int = DEFAULT_STATEMENT_TIMEOUT_MS
    sslmode: Optional[str] = None

    @classmethod
    def from_url(cls, url: str, **overrides: Any) -> "DBConfig":
        if not url:
            raise ValidationError("DATABASE_URL is required")
        sslmode = overrides.pop("sslmode", None)
        if sslmode is None and any(marker in url for marker in _HOSTED_MARKERS):
            sslmode = "require"
        return cls(dsn=url, sslmode=sslmode, **overrides)

    @classmethod
    def from_settings(cls, settings: Any) -> "DBConfig":
        return cls.from_url(
            getattr(settings, "DATABASE_URL", ""),
            max_connections=int(getattr(settings, "DB_POOL_MAX", DEFAULT_POOL_MAX)),
            idle_timeout_ms=int(getattr(settings, "DB_IDLE_TIMEOUT_MS", DEFAULT_IDLE_TIMEOUT_MS)),
            connection_timeout_ms=int(getattr(settings, "DB_CONNECTION_TIMEOUT_MS", DEFAULT_CONNECTION_TIMEOUT_MS)),
            statement_timeout_ms=int(getattr(settings, "DB_STATEMENT_TIMEOUT_MS", DEFAULT_STATEMENT_TIMEOUT_MS)),
        )


def _exit_process(code: int) -> None:
    os._exit(code)


class ConnectionPool:
    """Bounded pool of psycopg2 connections to the shared tenant database.

    Built once at startup and handed to every component that needs database access.
    Checkout waits at most ``connection_timeout_ms``; connections idle for longer
    than ``idle_timeout_ms`` are replaced on checkout, and reused ones are pinged
    with ``SELECT 1``. A connection found broken while it sat idle in the pool means
    the transport under the pool failed, which is fatal: it is logged and
    ``terminate`` is called so the process manager can restart the service.
    """

    def __init__(
        self,
        config: DBConfig,
        *,
        connect: Optional[Callable[..., Any]] = None,
        terminate: Optional[Callable[[int], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._config = config
        self._connect = connect or psycopg2.connect
        self._terminate = terminate or _exit_process
        self._clock = clock
        self._pool = QueuePool(
            self._create_connection,
            pool_size=int(config.max_connections),
            max_overflow=0,
            timeout=config.connection_timeout_ms / 1000.0,
            reset_on_return="rollback",
        )
        event.listen(self._pool, "checkin", self._on_checkin)
        event.listen(self._pool, "checkout", self._on_checkout)

    @property
    def config(self) -> DBConfig:
        return self._config

    def _create_connection(self):
        kwargs: dict[str, Any] = {
            "connect_timeout": max(1, int(self._config.connection_timeout_ms // 1000)),
            "options": f"-c statement_timeout={int(self._config.statement_timeout_ms)}",
        }
        if self._config.sslmode:
            kwargs["sslmode"] = self._config.sslmode
        conn = self._connect(self._config.dsn, **kwargs)
        logger.debug("Opened new database connection")
        return conn

    def _on_checkin(self, dbapi_connection, connection_record) -> None:
        if dbapi_connection is not None:
            connection_record.info["checked_in_at"] = self._clock()

    def _on_checkout(self, dbapi_connection, connection_record, connection_proxy) -> None:
        checked_in_at = connection_record.info.pop("checked_in_at", None)
        if checked_in_at is None:
            return
        if getattr(dbapi_connection, "closed", 0):
            self._fail(FatalPoolError("Pooled connection was closed while idle"))
        idle_ms = (self._clock() - checked_in_at) * 1000.0
        if idle_ms > self._config.idle_timeout_ms:
            # The pool discards the connection and retries with a fresh one.
            raise sa_exc.DisconnectionError(f"Connection idle for {idle_ms:.0f}ms")
        self._ping(dbapi_connection)

    def _ping(self, dbapi_connection) -> None:
        try:
            cur = dbapi_connection.cursor()
            try:
                cur.execute("SELECT 1")
            finally:
                cur.close()
            dbapi_connection.rollback()
        except (psycopg2.OperationalError, psycopg2.InterfaceError) as exc:
            self._fail(FatalPoolError(f"Pooled connection failed while idle: {exc}"))

    def _fail(self, error: FatalPoolError) -> None:
        logger.critical("Unexpected error on idle client: %s", error)
        self._terminate(1)
        raise error

    def acquire(self):
        """Check out a connection; ``close()`` on it returns it to the pool."""
        try:
            return self._pool.connect()
        except sa_exc.TimeoutError as exc:
            raise PoolTimeoutError(
                f"No database connection available within {self._config.connection_timeout_ms}ms"
            ) from exc

    @contextmanager
    def connection(self) -> Iterator[Any]:
        conn = self.acquire()
        try:
            yield conn
        finally:
            conn.close()

    def status(self) -> dict[str, int]:
        return {
            "size": self._pool.size(),
            "checked_out": self._pool.checkedout(),
            "idle": self._pool.checkedin(),
        }

    def dispose(self) -> None:
        self._pool.dispose()
        logger.info("Connection pool disposed")
