from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import psycopg2

from ..common.validators import is_valid_schema_format
from ..core.constants import SCHEMA_CACHE_TTL_SECONDS
from ..database.connection import ConnectionPool
from ..database.pg_base import db_cursor, fetch_scalar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationOutcome:
    valid: bool
    error: Optional[str] = None


class SchemaValidator:
    """Check that a schema name is well formed and exists before a query is scoped to it.

    Existence lookups are cached for a few minutes; lifecycle operations clear the
    entry of any schema they create or drop.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        ttl_seconds: float = SCHEMA_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._pool = pool
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._cache: Dict[str, Tuple[bool, float]] = {}

    def exists(self, schema_name: str) -> bool:
        cached = self._cache.get(schema_name)
        if cached and self._clock() - cached[1] < self._ttl:
            return cached[0]

        try:
            with db_cursor(self._pool) as (_, cur):
                cur.execute(
                    "SELECT EXISTS (SELECT 1 FROM information_schema.schemata WHERE schema_name = %s) AS exists",
                    (schema_name,),
                )
                found = bool(fetch_scalar(cur, False))
        except psycopg2.Error as exc:
            logger.error("Schema existence check failed: %s", exc)
            return False

        self._cache[schema_name] = (found, self._clock())
        return found

    def validate(self, schema_name: str) -> ValidationOutcome:
        if not schema_name:
            return ValidationOutcome(False, "Schema name is required")
        if not is_valid_schema_format(schema_name):
            logger.warning("Invalid schema format attempted: %r", schema_name)
            return ValidationOutcome(False, "Invalid schema name format")
        if not self.exists(schema_name):
            logger.warning("Non-existent schema attempted: %s", schema_name)
            return ValidationOutcome(False, "Schema does not exist")
        return ValidationOutcome(True)

    def clear(self, schema_name: Optional[str] = None) -> None:
        if schema_name is None:
            self._cache.clear()
        else:
            self._cache.pop(schema_name, None)
