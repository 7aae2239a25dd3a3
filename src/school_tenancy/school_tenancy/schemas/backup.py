from __future__ import annotations

import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence
from uuid import UUID

from ..database.pg_base import qualified, quote_ident


def _quote(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


def format_literal(value: Any) -> str:
    """Render one Python value as a SQL literal for the backup script."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, (dict, list)):
        return _quote(json.dumps(value, default=str))
    if isinstance(value, (datetime, date, time)):
        return _quote(value.isoformat())
    if isinstance(value, UUID):
        return _quote(str(value))
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "'\\x" + bytes(value).hex() + "'::bytea"
    return str(value)


def render_insert(schema_name: str, table_name: str, row: Dict[str, Any]) -> str:
    columns = ", ".join(quote_ident(c) for c in row.keys())
    values = ", ".join(format_literal(v) for v in row.values())
    return f"INSERT INTO {qualified(schema_name, table_name)} ({columns}) VALUES ({values});"


def render_backup(
    schema_name: str,
    tables: Sequence[tuple[str, List[Dict[str, Any]]]],
    *,
    generated_at: datetime,
    sequence_tables: Iterable[str] = (),
) -> str:
    """Build a self-contained script that recreates the schema and its rows.

    ``tables`` is ordered; tables without rows are left out of the data section.
    ``sequence_tables`` get their ``id`` sequence moved past the restored rows.
    """
    lines = [
        f"-- Backup of schema: {schema_name}",
        f"-- Generated at: {generated_at.isoformat()}",
        "",
        f"CREATE SCHEMA IF NOT EXISTS {quote_ident(schema_name)};",
        "",
    ]
    for table_name, rows in tables:
        if not rows:
            continue
        lines.append(f"-- Data for {schema_name}.{table_name}")
        lines.extend(render_insert(schema_name, table_name, row) for row in rows)
        lines.append("")

    for table_name in sequence_tables:
        target = qualified(schema_name, table_name)
        lines.append(
            f"SELECT setval(pg_get_serial_sequence({_quote(target)}, 'id'), "
            f"COALESCE((SELECT MAX(id) FROM {target}), 0) + 1, false);"
        )
    return "\n".join(lines).rstrip("\n") + "\n"
