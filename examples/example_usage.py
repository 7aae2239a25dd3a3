"""Example: use the data-access contract and schema tooling without any web layer.

Upper layers write `?` queries once; whichever backend was selected at startup runs them.
"""

from src.school_tenancy.school_tenancy.main import bootstrap


def main():
    container = bootstrap()
    if container.lifecycle is None:
        container.close()
        raise SystemExit("DATABASE_URL is not configured.")
    try:
        for schema_name in container.lifecycle.list():
            row = container.backend.get(
                "SELECT COUNT(*) AS students FROM students WHERE is_active = ?",
                [True],
                schema_name=schema_name,
            )
            print(schema_name, row)
    finally:
        container.close()


if __name__ == "__main__":
    main()
