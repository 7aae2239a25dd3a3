from __future__ import annotations

from psycopg2 import errors as pg_errors

from src.school_tenancy.school_tenancy.core.enums import TenantStatus
from src.school_tenancy.school_tenancy.schemas.service import ProvisioningService


def test_provision_creates_schema_and_seeds_catalogs(lifecycle, seeder, fake_db):
    service = ProvisioningService(lifecycle, seeder)

    result = service.provision(7, "WS2025")

    assert result.success
    assert result.schema_name == "school_ws2025"
    assert result.tenant.schema_name == "school_ws2025"
    assert result.tenant.status is TenantStatus.ACTIVE
    assert result.seed.counts["incident_types"] > 0
    assert fake_db.table("school_ws2025", "intervention_types").rows[0]["school_id"] == 7


def test_provision_stops_when_schema_exists(lifecycle, seeder):
    service = ProvisioningService(lifecycle, seeder)
    service.provision(7, "WS2025")

    again = service.provision(7, "WS2025")

    assert not again.success
    assert again.seed is None
    assert again.error == "Schema school_ws2025 already exists"


def test_provision_keeps_schema_when_seeding_fails(lifecycle, seeder, fake_db):
    fake_db.fail_on("INSERT INTO merit_types", pg_errors.UndefinedColumn('column "points" does not exist'))
    service = ProvisioningService(lifecycle, seeder)

    result = service.provision(7, "WS2025")

    assert not result.success
    assert result.schema.success
    assert not result.seed.success
    assert "school_ws2025" in fake_db.schemas
    assert fake_db.table("school_ws2025", "incident_types").rows == []
