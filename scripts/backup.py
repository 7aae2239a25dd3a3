"""Back up one school schema (or all of them) to plain SQL files.

Note: The script writes INSERT statements; for a full physical dump use
`pg_dump --schema=<name>` if the PostgreSQL client tools are installed.

Usage: python scripts/backup.py [schema_name ...]
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
    parser.add_argument("schemas", nargs="*", help="schema names; all school schemas when omitted")
    parser.add_argument("--output", help="output file (single schema only)")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(settings=settings)
    if container.lifecycle is None:
        raise SystemExit("DATABASE_URL is not configured.")

    failed = 0
    try:
        schemas = args.schemas or container.lifecycle.list()
        if args.output and len(schemas) != 1:
            raise SystemExit("--output needs exactly one schema")
        for schema_name in schemas:
            result = container.lifecycle.backup(schema_name, args.output)
            if result.success:
                print(f"OK: Backup created: {result.file_path}")
            else:
                failed += 1
                print(f"FAILED: {schema_name}: {result.error}")
    finally:
        container.close()

    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
