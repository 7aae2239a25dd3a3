from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ..core.constants import PUBLIC_SCHEMA
from ..core.enums import BackendKind
from ..core.exceptions import ValidationError
from ..database.connection import ConnectionPool
from ..database.pg_base import db_cursor, fetchall, fetchone, to_pyformat
from ..schemas.validator import SchemaValidator
from ..sql.translator import translate
from .base import DatabaseBackend, RunResult, extract_row_id

logger = logging.getLogger(__name__)


class PooledSqlBackend(DatabaseBackend):
    """Runs translated queries on the shared connection pool.

    With a validator, a call scoped to a schema that is malformed or missing is
    refused; otherwise unqualified tables would resolve to ``public``.
    """

    kind = BackendKind.POOLED_SQL

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        sql_debug: bool = False,
        validator: Optional[SchemaValidator] = None,
    ):
        self._pool = pool
        self._sql_debug = bool(sql_debug)
        self._validator = validator

    def _check_schema(self, schema_name: Optional[str]) -> None:
        if not schema_name or schema_name == PUBLIC_SCHEMA or self._validator is None:
            return
        outcome = self._validator.validate(schema_name)
        if not outcome.valid:
            raise ValidationError(f"{outcome.error}: {schema_name}")

    def _prepare(self, sql: str, params: Sequence[Any], schema_name: Optional[str]):
        self._check_schema(schema_name)
        query = translate(sql, params, strict=True)
        if self._sql_debug:
            logger.debug("Executing SQL: %s params=%r schema=%s", query.sql, query.params, schema_name)
        return to_pyformat(query.sql, query.params)

    def _execute(self, cur, sql: str, params: Sequence[Any]) -> None:
        if params:
            cur.execute(sql, params)
        else:
            cur.execute(sql)

    def init(self) -> None:
        with db_cursor(self._pool) as (_, cur):
            cur.execute("SELECT NOW() AS now")
            row = fetchone(cur)
        logger.info("PostgreSQL connection established (database time %s)", row and row.get("now"))

    def run(self, sql: str, params: Sequence[Any] = (), *, schema_name: Optional[str] = None) -> RunResult:
        native, bound = self._prepare(sql, params, schema_name)
        try:
            with db_cursor(self._pool, schema_name=schema_name) as (_, cur):
                self._execute(cur, native, bound)
                row = fetchone(cur) if cur.description else None
                return RunResult(id=extract_row_id(row), changes=max(int(cur.rowcount or 0), 0))
        except Exception as exc:
            logger.error("Database error: %s", exc)
            raise

    def get(self, sql: str, params: Sequence[Any] = (), *, schema_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        native, bound = self._prepare(sql, params, schema_name)
        try:
            with db_cursor(self._pool, schema_name=schema_name) as (_, cur):
                self._execute(cur, native, bound)
                return fetchone(cur)
        except Exception as exc:
            logger.error("Database error: %s", exc)
            raise

    def all(self, sql: str, params: Sequence[Any] = (), *, schema_name: Optional[str] = None) -> List[Dict[str, Any]]:
        native, bound = self._prepare(sql, params, schema_name)
        try:
            with db_cursor(self._pool, schema_name=schema_name) as (_, cur):
                self._execute(cur, native, bound)
                return fetchall(cur)
        except Exception as exc:
            logger.error("Database error: %s", exc)
            raise

    @contextmanager
    def transaction(self, schema_name: Optional[str] = None) -> Iterator[Any]:
        """Raw cursor inside one transaction, for callers needing several statements.

        Statements use native PostgreSQL syntax (``%s`` params); the search path is
        scoped to ``schema_name`` for the transaction only.
        """
        self._check_schema(schema_name)
        with db_cursor(self._pool, schema_name=schema_name) as (_, cur):
            yield cur
