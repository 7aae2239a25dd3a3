from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import psycopg2
from psycopg2 import errors as pg_errors

from ..common.datetime_utils import backup_timestamp, now_utc
from ..common.validators import require_non_empty, require_tenant_schema
from ..core.constants import (
    CLONE_EXCLUDED_TABLES,
    DATA_GUARD_TABLE,
    IDENTITY_COLUMN,
    PUBLIC_INIT_FILE,
    PUBLIC_SCHEMA,
    SCHEMA_PREFIX,
    SCHOOL_TEMPLATE_FILE,
)
from ..core.enums import StatementOutcome
from ..core.exceptions import ConflictError, DomainError, NotFoundError, TransientProvisioningError, ValidationError
from ..database.bootstrap import iter_sql_statements, load_sql_file, render_template
from ..database.connection import ConnectionPool
from ..database.pg_base import db_cursor, fetch_scalar, fetchall, qualified, quote_ident, savepoint
from .backup import render_backup
from .model import LifecycleResult, SchemaStats, StatementResult
from .naming import generate_schema_name
from .validator import SchemaValidator

logger = logging.getLogger(__name__)

_DUPLICATE_ERRORS = (
    pg_errors.DuplicateSchema,
    pg_errors.DuplicateTable,
    pg_errors.DuplicateObject,
    pg_errors.DuplicateColumn,
    pg_errors.DuplicateFunction,
    pg_errors.UniqueViolation,
)
_DUPLICATE_MARKERS = ("already exists", "duplicate key")

_STAT_QUERIES = (
    ("active_students", "students", "WHERE is_active = true"),
    ("active_teachers", "teachers", "WHERE is_active = true"),
    ("active_classes", "classes", "WHERE is_active = true"),
    ("incidents_this_month", "behaviour_incidents", "WHERE incident_date >= DATE_TRUNC('month', CURRENT_DATE)"),
    ("merits_this_month", "merits", "WHERE merit_date >= DATE_TRUNC('month', CURRENT_DATE)"),
)


def _error_message(exc: Exception) -> str:
    return (getattr(exc, "pgerror", None) or str(exc)).strip()


def is_duplicate_error(exc: Exception) -> bool:
    if isinstance(exc, _DUPLICATE_ERRORS):
        return True
    message = _error_message(exc).lower()
    return any(marker in message for marker in _DUPLICATE_MARKERS)


def dependency_order(tables: Sequence[str], edges: Iterable[tuple[str, str]]) -> List[str]:
    """Order tables so referenced (parent) tables come before their children.

    ``edges`` are ``(child, parent)`` pairs. Ties and cycles fall back to name order.
    """
    names = sorted(set(tables))
    parents: Dict[str, set[str]] = {name: set() for name in names}
    for child, parent in edges:
        if child in parents and parent in parents and child != parent:
            parents[child].add(parent)

    ordered: List[str] = []
    placed: set[str] = set()
    while len(ordered) < len(names):
        ready = [n for n in names if n not in placed and parents[n] <= placed]
        if not ready:
            ready = [next(n for n in names if n not in placed)]
        for name in ready:
            ordered.append(name)
            placed.add(name)
    return ordered


class SchemaLifecycleManager:
    """Create, drop, list, inspect, back up and clone tenant schemas.

    Every operation returns a :class:`LifecycleResult`; expected conditions
    (conflicts, missing schemas, database errors) never raise. Identifiers are
    only interpolated after passing the schema-name allow-list.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        templates_dir: Optional[Path] = None,
        backup_dir: Optional[Path] = None,
        validator: Optional[SchemaValidator] = None,
        clock: Callable = now_utc,
    ):
        self._pool = pool
        self._templates_dir = templates_dir
        self._backup_dir = Path(backup_dir) if backup_dir else Path.cwd() / "backups"
        self._validator = validator
        self._clock = clock

    # -- catalog helpers ---------------------------------------------------

    def _exists(self, cur, schema_name: str) -> bool:
        cur.execute(
            "SELECT EXISTS (SELECT 1 FROM information_schema.schemata WHERE schema_name = %s) AS exists",
            (schema_name,),
        )
        return bool(fetch_scalar(cur, False))

    def _base_tables(self, cur, schema_name: str) -> List[str]:
        cur.execute(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = %s AND table_type = 'BASE TABLE'
            ORDER BY table_name
            """,
            (schema_name,),
        )
        tables = [r["table_name"] for r in fetchall(cur)]

        cur.execute(
            """
            SELECT tc.table_name AS child, ccu.table_name AS parent
            FROM information_schema.table_constraints tc
            JOIN information_schema.constraint_column_usage ccu
              ON ccu.constraint_name = tc.constraint_name
             AND ccu.constraint_schema = tc.constraint_schema
            WHERE tc.constraint_type = 'FOREIGN KEY' AND tc.table_schema = %s
            """,
            (schema_name,),
        )
        edges = [(r["child"], r["parent"]) for r in fetchall(cur)]
        return dependency_order(tables, edges)

    def _columns(self, cur, schema_name: str, table_name: str) -> List[str]:
        cur.execute(
            """
            SELECT column_name
            FROM information_schema.columns
            WHERE table_schema = %s AND table_name = %s AND column_name <> %s
            ORDER BY ordinal_position
            """,
            (schema_name, table_name, IDENTITY_COLUMN),
        )
        return [r["column_name"] for r in fetchall(cur)]

    def _count(self, cur, schema_name: str, table_name: str, where: str = "") -> int:
        sql = f"SELECT COUNT(*) AS count FROM {qualified(schema_name, table_name)} {where}".strip()
        try:
            with savepoint(cur, "count_rows"):
                cur.execute(sql)
                return int(fetch_scalar(cur, 0) or 0)
        except psycopg2.Error as exc:
            logger.warning("Count on %s.%s failed, using 0: %s", schema_name, table_name, _error_message(exc))
            return 0

    def _apply_statements(self, cur, sql: str, outcomes: List[StatementResult]) -> List[StatementResult]:
        for statement in iter_sql_statements(sql):
            try:
                with savepoint(cur, "provision_stmt"):
                    cur.execute(statement)
            except psycopg2.Error as exc:
                if not is_duplicate_error(exc):
                    outcomes.append(StatementResult(statement, StatementOutcome.FAILED, _error_message(exc)))
                    raise
                skipped = TransientProvisioningError(statement, _error_message(exc))
                logger.info("Statement already applied, skipping: %s", skipped)
                outcomes.append(StatementResult(statement, StatementOutcome.SKIPPED_DUPLICATE, str(skipped)))
            else:
                outcomes.append(StatementResult(statement, StatementOutcome.APPLIED))
        return outcomes

    def _forget(self, schema_name: str) -> None:
        if self._validator is not None:
            self._validator.clear(schema_name)

    # -- operations --------------------------------------------------------

    def exists(self, schema_name: str) -> bool:
        with db_cursor(self._pool) as (_, cur):
            return self._exists(cur, schema_name)

    def list(self) -> List[str]:
        with db_cursor(self._pool) as (_, cur):
            cur.execute(
                "SELECT schema_name FROM information_schema.schemata WHERE schema_name LIKE %s ORDER BY schema_name",
                (SCHEMA_PREFIX.replace("_", "\\_") + "%",),
            )
            return sorted(r["schema_name"] for r in fetchall(cur))

    def create(self, school_code: str) -> LifecycleResult:
        try:
            require_non_empty(school_code, "School code")
        except ValidationError as exc:
            return LifecycleResult.failure(exc)

        schema_name = generate_schema_name(school_code)
        outcomes: List[StatementResult] = []
        try:
            # PostgreSQL silently truncates identifiers past 63 characters.
            require_tenant_schema(schema_name)
            template = render_template(
                load_sql_file(SCHOOL_TEMPLATE_FILE, templates_dir=self._templates_dir), schema_name
            )
            with db_cursor(self._pool) as (_, cur):
                # Serializes concurrent creates of the same school; released at commit.
                cur.execute("SELECT pg_advisory_xact_lock(hashtext(%s))", (schema_name,))
                if self._exists(cur, schema_name):
                    raise ConflictError(f"Schema {schema_name} already exists")
                self._apply_statements(cur, template, outcomes)
        except (DomainError, psycopg2.Error, OSError) as exc:
            logger.error("Error creating schema %s: %s", schema_name, exc)
            return LifecycleResult.failure(exc, schema_name=schema_name, statements=outcomes)

        self._forget(schema_name)
        logger.info(
            "Created schema %s (%d applied, %d skipped)",
            schema_name,
            sum(1 for o in outcomes if o.outcome == StatementOutcome.APPLIED),
            sum(1 for o in outcomes if o.outcome == StatementOutcome.SKIPPED_DUPLICATE),
        )
        return LifecycleResult(success=True, schema_name=schema_name, statements=outcomes)

    def drop(self, schema_name: str, force: bool = False) -> LifecycleResult:
        """Drop a tenant schema with everything in it. Irreversible."""
        if schema_name == PUBLIC_SCHEMA:
            return LifecycleResult.failure(ValidationError("Cannot drop public schema"), schema_name=schema_name)

        try:
            require_tenant_schema(schema_name)
            with db_cursor(self._pool) as (_, cur):
                if not self._exists(cur, schema_name):
                    raise NotFoundError(f"Schema {schema_name} does not exist")
                if not force and self._count(cur, schema_name, DATA_GUARD_TABLE) > 0:
                    raise ConflictError(f"Schema {schema_name} contains data. Use force=True to delete anyway.")
                cur.execute(f"DROP SCHEMA IF EXISTS {quote_ident(schema_name)} CASCADE")
        except (DomainError, psycopg2.Error) as exc:
            logger.error("Error dropping schema %s: %s", schema_name, exc)
            return LifecycleResult.failure(exc, schema_name=schema_name)

        self._forget(schema_name)
        logger.info("Dropped schema %s", schema_name)
        return LifecycleResult(success=True, schema_name=schema_name)

    def stats(self, schema_name: str) -> LifecycleResult:
        try:
            require_tenant_schema(schema_name)
            with db_cursor(self._pool) as (_, cur):
                if not self._exists(cur, schema_name):
                    raise NotFoundError(f"Schema {schema_name} does not exist")
                counters = {
                    key: self._count(cur, schema_name, table, where) for key, table, where in _STAT_QUERIES
                }
        except (DomainError, psycopg2.Error) as exc:
            logger.error("Error getting stats for %s: %s", schema_name, exc)
            return LifecycleResult.failure(exc, schema_name=schema_name)

        return LifecycleResult(success=True, schema_name=schema_name, stats=SchemaStats(**counters))

    def backup(self, schema_name: str, output_path: Optional[str | Path] = None) -> LifecycleResult:
        """Write INSERT statements for every row of the schema to a SQL file.

        The script recreates the schema if absent and repopulates it; restoring it
        is left to the operator. Tables are emitted parents first so the script
        can run against a freshly provisioned schema.
        """
        try:
            require_tenant_schema(schema_name)
            with db_cursor(self._pool) as (_, cur):
                if not self._exists(cur, schema_name):
                    raise NotFoundError(f"Schema {schema_name} does not exist")
                tables = []
                for table_name in self._base_tables(cur, schema_name):
                    cur.execute(f"SELECT * FROM {qualified(schema_name, table_name)}")
                    tables.append((table_name, fetchall(cur)))

            generated_at = self._clock()
            script = render_backup(
                schema_name,
                tables,
                generated_at=generated_at,
                sequence_tables=[t for t, rows in tables if rows and IDENTITY_COLUMN in rows[0]],
            )
            path = (
                Path(output_path)
                if output_path
                else self._backup_dir / f"{schema_name}_{backup_timestamp(generated_at)}.sql"
            )
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(script, encoding="utf-8")
        except (DomainError, psycopg2.Error, OSError) as exc:
            logger.error("Error backing up %s: %s", schema_name, exc)
            return LifecycleResult.failure(exc, schema_name=schema_name)

        logger.info("Backup saved to: %s", path)
        return LifecycleResult(
            success=True,
            schema_name=schema_name,
            file_path=str(path),
            row_counts={t: len(rows) for t, rows in tables},
        )

    def clone(self, source_schema: str, target_code: str) -> LifecycleResult:
        """Provision a new school and copy the source school's rows into it.

        Best effort: a table that fails to copy is logged and skipped, so callers
        needing exact fidelity should compare row counts afterwards.
        """
        target_schema = generate_schema_name(target_code)
        try:
            require_tenant_schema(source_schema)
            require_tenant_schema(target_schema)
            if not self.exists(source_schema):
                raise NotFoundError(f"Source schema {source_schema} does not exist")
            if self.exists(target_schema):
                raise ConflictError(f"Target schema {target_schema} already exists")
        except (DomainError, psycopg2.Error) as exc:
            return LifecycleResult.failure(exc, schema_name=target_schema)

        created = self.create(target_code)
        if not created.success:
            return created

        copied: List[str] = []
        skipped: List[str] = []
        try:
            with db_cursor(self._pool) as (_, cur):
                for table_name in self._base_tables(cur, source_schema):
                    if table_name in CLONE_EXCLUDED_TABLES:
                        skipped.append(table_name)
                        continue
                    target_columns = set(self._columns(cur, target_schema, table_name))
                    columns = [c for c in self._columns(cur, source_schema, table_name) if c in target_columns]
                    if not columns:
                        skipped.append(table_name)
                        continue

                    column_sql = ", ".join(quote_ident(c) for c in columns)
                    try:
                        with savepoint(cur, "clone_table"):
                            cur.execute(
                                f"INSERT INTO {qualified(target_schema, table_name)} ({column_sql}) "
                                f"SELECT {column_sql} FROM {qualified(source_schema, table_name)}"
                            )
                    except psycopg2.Error as exc:
                        logger.warning("Warning copying %s: %s", table_name, _error_message(exc))
                        skipped.append(table_name)
                    else:
                        copied.append(table_name)
        except (DomainError, psycopg2.Error) as exc:
            logger.error("Error cloning schema %s: %s", source_schema, exc)
            return LifecycleResult.failure(exc, schema_name=target_schema, statements=created.statements)

        self._forget(target_schema)
        logger.info("Cloned %s to %s (%d tables copied)", source_schema, target_schema, len(copied))
        return LifecycleResult(
            success=True,
            schema_name=target_schema,
            statements=created.statements,
            copied_tables=copied,
            skipped_tables=skipped,
        )

    def init_public(self) -> LifecycleResult:
        """Create the platform tables in the public schema. Safe to re-run."""
        outcomes: List[StatementResult] = []
        try:
            sql = load_sql_file(PUBLIC_INIT_FILE, templates_dir=self._templates_dir)
            with db_cursor(self._pool) as (_, cur):
                self._apply_statements(cur, sql, outcomes)
        except (psycopg2.Error, OSError) as exc:
            logger.error("Error initializing public schema: %s", exc)
            return LifecycleResult.failure(exc, schema_name=PUBLIC_SCHEMA, statements=outcomes)

        logger.info("Public schema initialized")
        return LifecycleResult(success=True, schema_name=PUBLIC_SCHEMA, statements=outcomes)
