from __future__ import annotations

from src.school_tenancy.school_tenancy.core.constants import SCHEMA_NAME_TOKEN, SCHOOL_TEMPLATE_FILE
from src.school_tenancy.school_tenancy.database.bootstrap import iter_sql_statements, load_sql_file, render_template


def test_splitter_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- leading comment; not a statement
    INSERT INTO t (a) VALUES ('x;y');
    CREATE TABLE "odd;name" (id INT);

    SELECT 1
    """
    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t (a) VALUES ('x;y')",
        'CREATE TABLE "odd;name" (id INT)',
        "SELECT 1",
    ]


def test_splitter_keeps_dollar_quoted_bodies_whole():
    sql = (
        "CREATE FUNCTION f() RETURNS void AS $body$ BEGIN PERFORM 1; PERFORM 2; END; $body$ LANGUAGE plpgsql;"
        "SELECT $$a;b$$;"
        "SELECT * FROM t WHERE id = $1;"
    )
    statements = list(iter_sql_statements(sql))
    assert len(statements) == 3
    assert statements[0].endswith("$body$ LANGUAGE plpgsql")
    assert statements[1] == "SELECT $$a;b$$"
    assert statements[2] == "SELECT * FROM t WHERE id = $1"


def test_school_template_renders_every_token():
    rendered = render_template(load_sql_file(SCHOOL_TEMPLATE_FILE), "school_ws2025")
    assert SCHEMA_NAME_TOKEN not in rendered

    statements = list(iter_sql_statements(rendered))
    assert statements[0] == "CREATE SCHEMA IF NOT EXISTS school_ws2025"
    assert any("school_ws2025.students" in s for s in statements)
    assert all("{" not in s for s in statements)
