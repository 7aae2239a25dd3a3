"""Seed default incident/merit/intervention types into an existing school schema.

Usage: python scripts/seed_db.py <tenant_id> <schema_name>
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.school_tenancy.school_tenancy.container import build_container
from src.school_tenancy.school_tenancy.main import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("tenant_id", type=int)
    parser.add_argument("schema_name")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(settings=settings)
    if container.seeder is None:
        raise SystemExit("DATABASE_URL is not configured.")
    try:
        result = container.seeder.seed(args.tenant_id, args.schema_name)
    finally:
        container.close()

    if not result.success:
        raise SystemExit(f"FAILED: {result.error}")
    print(f"OK: Seeded {args.schema_name} -> {result.counts}")


if __name__ == "__main__":
    main()
