from __future__ import annotations

from src.school_tenancy.school_tenancy.schemas.validator import SchemaValidator


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _lookups(fake_db) -> int:
    return sum(1 for s in fake_db.executed if "information_schema.schemata WHERE schema_name = %s" in s)


def test_validate_rejects_bad_names_without_querying(pool, fake_db):
    validator = SchemaValidator(pool)

    assert validator.validate("").error == "Schema name is required"
    assert validator.validate("public").error == "Invalid schema name format"
    assert validator.validate("school_A").error == "Invalid schema name format"
    assert _lookups(fake_db) == 0


def test_validate_checks_existence(pool, fake_db):
    fake_db.add_schema("school_ws2025")
    validator = SchemaValidator(pool)

    assert validator.validate("school_ws2025").valid
    assert validator.validate("school_ghost").error == "Schema does not exist"


def test_existence_is_cached_until_ttl(pool, fake_db):
    clock = Clock()
    validator = SchemaValidator(pool, ttl_seconds=300, clock=clock)
    fake_db.add_schema("school_ws2025")

    assert validator.exists("school_ws2025")
    del fake_db.schemas["school_ws2025"]
    assert validator.exists("school_ws2025")
    assert _lookups(fake_db) == 1

    clock.now = 301.0
    assert not validator.exists("school_ws2025")
    assert _lookups(fake_db) == 2


def test_clear_drops_cached_entries(pool, fake_db):
    validator = SchemaValidator(pool)
    fake_db.add_schema("school_ws2025")
    validator.exists("school_ws2025")
    del fake_db.schemas["school_ws2025"]

    validator.clear()

    assert not validator.exists("school_ws2025")
