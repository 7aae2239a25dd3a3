from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..catalog.seeder import DefaultCatalogSeeder
from .model import LifecycleResult, SeedResult, Tenant
from .lifecycle import SchemaLifecycleManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionResult:
    success: bool
    schema_name: Optional[str]
    schema: LifecycleResult
    seed: Optional[SeedResult] = None
    error: Optional[str] = None
    tenant: Optional[Tenant] = None


class ProvisioningService:
    """Use case: bring a new school online (schema from template, then default catalogs)."""

    def __init__(self, lifecycle: SchemaLifecycleManager, seeder: DefaultCatalogSeeder):
        self._lifecycle = lifecycle
        self._seeder = seeder

    def provision(self, tenant_id: int, school_code: str) -> ProvisionResult:
        created = self._lifecycle.create(school_code)
        if not created.success:
            return ProvisionResult(False, created.schema_name, created, error=created.error)

        seeded = self._seeder.seed(tenant_id, created.schema_name)
        if not seeded.success:
            # The schema stays; seeding is idempotent and can be re-run.
            logger.warning("Schema %s created but seeding failed: %s", created.schema_name, seeded.error)
            return ProvisionResult(False, created.schema_name, created, seeded, error=seeded.error)

        tenant = Tenant(tenant_id=tenant_id, code=school_code, schema_name=created.schema_name)
        return ProvisionResult(True, created.schema_name, created, seeded, tenant=tenant)
