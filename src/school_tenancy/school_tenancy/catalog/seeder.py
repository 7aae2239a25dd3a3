from __future__ import annotations

import logging
from typing import Dict

import psycopg2

from ..common.validators import require_tenant_schema
from ..core.exceptions import DomainError
from ..database.connection import ConnectionPool
from ..database.pg_base import db_cursor
from ..schemas.model import SeedResult
from .defaults import INCIDENT_TYPES, INTERVENTION_TYPES, MERIT_TYPES

logger = logging.getLogger(__name__)


class DefaultCatalogSeeder:
    """Insert the default incident, merit and intervention types into a school schema.

    Rows are matched by name, so running it again inserts nothing and reports
    zero counts.
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    @staticmethod
    def _absent(cur, table: str, name: str) -> bool:
        cur.execute(f"SELECT id FROM {table} WHERE name = %s", (name,))
        return cur.fetchone() is None

    def seed(self, tenant_id: int, schema_name: str) -> SeedResult:
        counts: Dict[str, int] = {"incident_types": 0, "merit_types": 0, "intervention_types": 0}
        try:
            require_tenant_schema(schema_name)
            with db_cursor(self._pool, schema_name=schema_name) as (_, cur):
                for item in INCIDENT_TYPES:
                    if self._absent(cur, "incident_types", item.name):
                        cur.execute(
                            """
                            INSERT INTO incident_types (name, points, severity, description, is_active)
                            VALUES (%s, %s, %s, %s, true)
                            """,
                            (item.name, item.points, item.severity, item.description),
                        )
                        counts["incident_types"] += 1

                for item in MERIT_TYPES:
                    if self._absent(cur, "merit_types", item.name):
                        cur.execute(
                            """
                            INSERT INTO merit_types (name, points, description, is_active)
                            VALUES (%s, %s, %s, true)
                            """,
                            (item.name, item.points, item.description),
                        )
                        counts["merit_types"] += 1

                for item in INTERVENTION_TYPES:
                    if self._absent(cur, "intervention_types", item.name):
                        cur.execute(
                            """
                            INSERT INTO intervention_types (name, description, default_duration, is_active, school_id)
                            VALUES (%s, %s, %s, true, %s)
                            """,
                            (item.name, item.description, item.duration, tenant_id),
                        )
                        counts["intervention_types"] += 1
        except (DomainError, psycopg2.Error) as exc:
            logger.error("Error seeding default types for school %s: %s", tenant_id, exc)
            return SeedResult(success=False, error=str(exc))

        logger.info("Seeded default types for school %s: %s", tenant_id, counts)
        return SeedResult(success=True, counts=counts)
