from __future__ import annotations

import pytest

from src.school_tenancy.school_tenancy.backends.base import extract_row_id
from src.school_tenancy.school_tenancy.backends.pooled_sql import PooledSqlBackend
from src.school_tenancy.school_tenancy.core.enums import BackendKind
from src.school_tenancy.school_tenancy.core.exceptions import ValidationError


@pytest.fixture
def backend(pool, lifecycle):
    lifecycle.create("WS2025")
    return PooledSqlBackend(pool)


def test_init_checks_connectivity(backend, fake_db):
    backend.init()
    assert "SELECT NOW() AS now" in fake_db.executed


def test_run_translates_placeholders_and_scopes_schema(backend, fake_db):
    result = backend.run(
        "INSERT INTO merit_types (name, points) VALUES (?, ?)",
        ["Helpful", 2],
        schema_name="school_ws2025",
    )

    assert result.changes == 1
    assert result.id is None
    assert fake_db.executed[-2] == 'SET LOCAL search_path TO "school_ws2025", public'
    assert fake_db.executed[-1] == "INSERT INTO merit_types (name, points) VALUES (%s, %s)"
    assert fake_db.table("school_ws2025", "merit_types").rows[0]["name"] == "Helpful"


def test_get_returns_first_row_or_none(backend, fake_db):
    fake_db.table("school_ws2025", "incident_types").insert({"name": "Late to Class"})

    row = backend.get("SELECT id FROM incident_types WHERE name = ?", ["Late to Class"], schema_name="school_ws2025")
    missing = backend.get("SELECT id FROM incident_types WHERE name = ?", ["Nope"], schema_name="school_ws2025")

    assert row == {"id": 1}
    assert missing is None


def test_all_returns_list_of_dicts(backend, fake_db):
    fake_db.table("school_ws2025", "classes").insert({"class_name": "7A"})
    fake_db.table("school_ws2025", "classes").insert({"class_name": "7B"})

    rows = backend.all('SELECT * FROM "school_ws2025"."classes"')

    assert [r["class_name"] for r in rows] == ["7A", "7B"]


def test_parameter_mismatch_is_rejected_before_execution(backend, fake_db):
    before = len(fake_db.executed)
    with pytest.raises(ValidationError):
        backend.get("SELECT id FROM incident_types WHERE name = ?", [])
    assert len(fake_db.executed) == before


def test_database_errors_propagate(backend):
    with pytest.raises(Exception) as excinfo:
        backend.get("SELECT id FROM incident_types WHERE name = ?", ["x"], schema_name="school_missing")
    assert "does not exist" in str(excinfo.value)


def test_transaction_rolls_back_together(backend, fake_db):
    with pytest.raises(RuntimeError):
        with backend.transaction("school_ws2025") as cur:
            cur.execute("INSERT INTO merit_types (name) VALUES (%s)", ("Kind",))
            raise RuntimeError("abort")

    assert fake_db.table("school_ws2025", "merit_types").rows == []


def test_validated_backend_refuses_missing_schema(pool, lifecycle, validator, fake_db):
    lifecycle.create("WS2025")
    backend = PooledSqlBackend(pool, validator=validator)

    with pytest.raises(ValidationError, match="Schema does not exist: school_ghost"):
        backend.get("SELECT id FROM incident_types WHERE name = ?", ["x"], schema_name="school_ghost")
    with pytest.raises(ValidationError, match="Schema does not exist"):
        with backend.transaction("school_ghost"):
            pass

    assert not any("school_ghost" in s and s.startswith("SET LOCAL") for s in fake_db.executed)


def test_validated_backend_refuses_malformed_schema_without_querying(pool, validator, fake_db):
    backend = PooledSqlBackend(pool, validator=validator)
    before = len(fake_db.executed)

    with pytest.raises(ValidationError, match="Invalid schema name format"):
        backend.run("INSERT INTO merit_types (name) VALUES (?)", ["x"], schema_name="public; DROP")
    assert len(fake_db.executed) == before


def test_validated_backend_runs_against_existing_schema(pool, lifecycle, validator, fake_db):
    lifecycle.create("WS2025")
    backend = PooledSqlBackend(pool, validator=validator)

    result = backend.run(
        "INSERT INTO merit_types (name, points) VALUES (?, ?)", ["Kind", 1], schema_name="school_ws2025"
    )
    rows = backend.all('SELECT * FROM "school_ws2025"."merit_types"', schema_name="public")

    assert result.changes == 1
    assert [r["name"] for r in rows] == ["Kind"]


def test_backend_kind():
    assert PooledSqlBackend.kind is BackendKind.POOLED_SQL


def test_extract_row_id():
    assert extract_row_id({"id": 7, "name": "x"}) == 7
    assert extract_row_id({"student_id": 3}) == 3
    assert extract_row_id({"name": "x"}) is None
    assert extract_row_id(None) is None
