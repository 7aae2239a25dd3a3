"""Operator commands for school schemas.

Examples:
    python scripts/manage_schools.py list
    python scripts/manage_schools.py provision 12 WS2025
    python scripts/manage_schools.py stats school_ws2025
    python scripts/manage_schools.py clone school_ws2025 WS2026
    python scripts/manage_schools.py drop school_ws2025 --force
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

from src.school_tenancy.school_tenancy.container import Container, build_container
from src.school_tenancy.school_tenancy.main import configure_logging


def _report(result) -> int:
    if result.success:
        print(f"OK: {result.schema_name}")
        return 0
    print(f"FAILED: {result.error}")
    return 1


def run(container: Container, args: argparse.Namespace) -> int:
    lifecycle = container.lifecycle

    if args.command == "list":
        for name in lifecycle.list():
            print(name)
        return 0

    if args.command == "create":
        return _report(lifecycle.create(args.code))

    if args.command == "provision":
        result = container.provisioning.provision(args.tenant_id, args.code)
        if result.success:
            print(f"OK: {result.schema_name} seeded {result.seed.counts}")
            return 0
        print(f"FAILED: {result.error}")
        return 1

    if args.command == "drop":
        return _report(lifecycle.drop(args.schema_name, force=args.force))

    if args.command == "stats":
        result = lifecycle.stats(args.schema_name)
        if not result.success:
            print(f"FAILED: {result.error}")
            return 1
        for key, value in result.stats.as_dict().items():
            print(f"{key}: {value}")
        return 0

    if args.command == "clone":
        result = lifecycle.clone(args.source, args.target_code)
        if result.success:
            print(f"OK: {result.schema_name} (copied: {', '.join(result.copied_tables) or '-'})")
            return 0
        print(f"FAILED: {result.error}")
        return 1

    raise SystemExit(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list")

    create = sub.add_parser("create")
    create.add_argument("code")

    provision = sub.add_parser("provision")
    provision.add_argument("tenant_id", type=int)
    provision.add_argument("code")

    drop = sub.add_parser("drop")
    drop.add_argument("schema_name")
    drop.add_argument("--force", action="store_true")

    stats = sub.add_parser("stats")
    stats.add_argument("schema_name")

    clone = sub.add_parser("clone")
    clone.add_argument("source")
    clone.add_argument("target_code")
    return parser


def main() -> None:
    args = build_parser().parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(settings=settings)
    if container.lifecycle is None:
        raise SystemExit("DATABASE_URL is not configured.")
    try:
        code = run(container, args)
    finally:
        container.close()
    raise SystemExit(code)


if __name__ == "__main__":
    main()
