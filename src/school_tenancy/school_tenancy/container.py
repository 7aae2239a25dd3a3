from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .backends.base import DatabaseBackend
from .backends.factory import select_backend
from .catalog.seeder import DefaultCatalogSeeder
from .database.connection import ConnectionPool, DBConfig
from .schemas.lifecycle import SchemaLifecycleManager
from .schemas.service import ProvisioningService
from .schemas.validator import SchemaValidator


@dataclass(frozen=True)
class Container:
    backend: DatabaseBackend
    pool: Optional[ConnectionPool] = None

    validator: Optional[SchemaValidator] = None
    lifecycle: Optional[SchemaLifecycleManager] = None
    seeder: Optional[DefaultCatalogSeeder] = None
    provisioning: Optional[ProvisioningService] = None

    def close(self) -> None:
        if self.pool is not None:
            self.pool.dispose()


def build_container(*, settings: Any, pool: Optional[ConnectionPool] = None, session=None) -> Container:
    """Wire every component once. The backend choice is not revisited afterwards.

    Schema management always talks to PostgreSQL directly, so it is only available
    when ``DATABASE_URL`` is configured (or a pool is passed in).
    """
    if pool is None and getattr(settings, "DATABASE_URL", ""):
        pool = ConnectionPool(DBConfig.from_settings(settings))

    validator = SchemaValidator(pool) if pool is not None else None
    backend = select_backend(settings, pool=pool, session=session, validator=validator)
    if pool is None:
        return Container(backend=backend)

    backup_dir = getattr(settings, "BACKUP_DIR", None)
    lifecycle = SchemaLifecycleManager(
        pool,
        backup_dir=Path(backup_dir) if backup_dir else None,
        validator=validator,
    )
    seeder = DefaultCatalogSeeder(pool)

    return Container(
        backend=backend,
        pool=pool,
        validator=validator,
        lifecycle=lifecycle,
        seeder=seeder,
        provisioning=ProvisioningService(lifecycle, seeder),
    )
