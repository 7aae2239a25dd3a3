from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.enums import BackendKind
from ..database.connection import ConnectionPool
from ..schemas.validator import SchemaValidator
from .base import DatabaseBackend
from .pooled_sql import PooledSqlBackend
from .remote_rpc import RemoteRpcBackend

logger = logging.getLogger(__name__)


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


class BackendFactory:
    """Factory Pattern: choose the data-access backend from configuration.

    Called once at startup; the chosen backend serves every call afterwards.
    """

    def choose(self, settings: Any) -> BackendKind:
        use_remote = _flag(getattr(settings, "USE_SUPABASE", False))
        has_remote_config = bool(getattr(settings, "SUPABASE_URL", "")) and bool(
            getattr(settings, "SUPABASE_SERVICE_ROLE_KEY", "")
        )
        if use_remote and has_remote_config:
            return BackendKind.REMOTE_RPC
        if use_remote:
            logger.warning("USE_SUPABASE is set but SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY is missing")
        return BackendKind.POOLED_SQL

    def create(
        self,
        settings: Any,
        *,
        pool: Optional[ConnectionPool] = None,
        session=None,
        validator: Optional[SchemaValidator] = None,
    ) -> DatabaseBackend:
        kind = self.choose(settings)
        sql_debug = _flag(getattr(settings, "SQL_DEBUG", False))
        if kind is BackendKind.REMOTE_RPC:
            logger.info("[Database] Using remote RPC backend")
            return RemoteRpcBackend(
                settings.SUPABASE_URL,
                settings.SUPABASE_SERVICE_ROLE_KEY,
                session=session,
                sql_debug=sql_debug,
            )

        if pool is None:
            raise ValueError("A connection pool is required for the pooled SQL backend")
        logger.info("[Database] Using PostgreSQL pool")
        return PooledSqlBackend(pool, sql_debug=sql_debug, validator=validator)


def select_backend(
    settings: Any,
    *,
    pool: Optional[ConnectionPool] = None,
    session=None,
    validator: Optional[SchemaValidator] = None,
) -> DatabaseBackend:
    return BackendFactory().create(settings, pool=pool, session=session, validator=validator)
