from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

from psycopg2.extras import RealDictCursor

from ..common.validators import is_valid_schema_format
from ..core.constants import PUBLIC_SCHEMA
from ..core.exceptions import ValidationError
from .connection import ConnectionPool

_MARKER = re.compile(
    r"'(?:[^']|'')*'"
    r'|"(?:[^"]|"")*"'
    r"|(?P<tag>\$(?:[A-Za-z_][A-Za-z0-9_]*)?\$).*?(?P=tag)"
    r"|--[^\n]*"
    r"|\$(?P<index>\d+)",
    re.DOTALL,
)


def quote_ident(name: str) -> str:
    """Quote one SQL identifier. The only place identifiers are quoted."""
    return '"' + str(name).replace('"', '""') + '"'


def qualified(schema_name: str, table_name: str) -> str:
    return f"{quote_ident(schema_name)}.{quote_ident(table_name)}"


def search_path_sql(schema_name: Optional[str]) -> str:
    """``SET LOCAL`` statement scoping the current transaction to a tenant schema."""
    if not schema_name or schema_name == PUBLIC_SCHEMA:
        return f"SET LOCAL search_path TO {PUBLIC_SCHEMA}"
    if not is_valid_schema_format(schema_name):
        raise ValidationError(f"Invalid schema name format: {schema_name!r}")
    return f"SET LOCAL search_path TO {quote_ident(schema_name)}, {PUBLIC_SCHEMA}"


def to_pyformat(sql: str, params: Sequence[Any]) -> Tuple[str, Tuple[Any, ...]]:
    """Bind native ``$n`` markers for a ``%s`` paramstyle driver.

    Params are reordered to follow marker occurrence, so ``$2 ... $1`` and repeated
    markers work. Markers inside quoted literals, quoted identifiers, dollar-quoted
    bodies and comments are left alone. Literal ``%`` is doubled because the driver
    formats the query.
    """
    params = list(params or [])
    if not any(m.group("index") for m in _MARKER.finditer(sql)):
        return sql, tuple(params)

    ordered: list[Any] = []

    def _bind(match: re.Match) -> str:
        if match.group("index") is None:
            return match.group(0)
        index = int(match.group("index")) - 1
        if index < 0 or index >= len(params):
            raise ValidationError(f"No parameter supplied for ${index + 1}")
        ordered.append(params[index])
        return "%s"

    escaped = sql.replace("%", "%%")
    return _MARKER.sub(_bind, escaped), tuple(ordered)


@contextmanager
def db_cursor(pool: ConnectionPool, *, schema_name: Optional[str] = None, dictionary: bool = True):
    """One transaction on one pooled connection; commit on success, rollback on error."""
    with pool.connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor) if dictionary else conn.cursor()
        try:
            if schema_name is not None:
                cur.execute(search_path_sql(schema_name))
            yield conn, cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cur.close()


@contextmanager
def savepoint(cur, name: str = "sp"):
    """Isolate one statement so its failure does not abort the whole transaction."""
    cur.execute(f"SAVEPOINT {name}")
    try:
        yield
    except Exception:
        cur.execute(f"ROLLBACK TO SAVEPOINT {name}")
        raise
    cur.execute(f"RELEASE SAVEPOINT {name}")


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return dict(row) if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return [dict(r) for r in rows or []]


def fetch_scalar(cur, default: Any = None) -> Any:
    row = cur.fetchone()
    if not row:
        return default
    if isinstance(row, dict):
        return next(iter(row.values()), default)
    return row[0]
