from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.school_tenancy.school_tenancy.catalog.seeder import DefaultCatalogSeeder
from src.school_tenancy.school_tenancy.database.connection import ConnectionPool, DBConfig
from src.school_tenancy.school_tenancy.schemas.lifecycle import SchemaLifecycleManager
from src.school_tenancy.school_tenancy.schemas.validator import SchemaValidator
from tests.fakes import FakeDatabase


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def terminated() -> list[int]:
    return []


@pytest.fixture
def pool(fake_db, terminated):
    pool = ConnectionPool(
        DBConfig(dsn="postgresql://fake/school_platform", max_connections=3, connection_timeout_ms=200),
        connect=fake_db.connect,
        terminate=terminated.append,
    )
    yield pool
    pool.dispose()


@pytest.fixture
def validator(pool) -> SchemaValidator:
    return SchemaValidator(pool)


@pytest.fixture
def lifecycle(pool, validator, tmp_path) -> SchemaLifecycleManager:
    return SchemaLifecycleManager(
        pool,
        backup_dir=tmp_path / "backups",
        validator=validator,
        clock=lambda: datetime(2026, 3, 1, 8, 30, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def seeder(pool) -> DefaultCatalogSeeder:
    return DefaultCatalogSeeder(pool)
