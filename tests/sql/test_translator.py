from __future__ import annotations

import pytest

from src.school_tenancy.school_tenancy.core.exceptions import ValidationError
from src.school_tenancy.school_tenancy.database.pg_base import to_pyformat
from src.school_tenancy.school_tenancy.sql.translator import translate


def test_translate_numbers_placeholders_and_rewrites_now():
    query = translate(
        "SELECT * FROM t WHERE a = ? AND b = ? AND c > datetime('now')",
        [1, "x"],
    )
    assert query.sql == "SELECT * FROM t WHERE a = $1 AND b = $2 AND c > CURRENT_TIMESTAMP"
    assert query.params == [1, "x"]


def test_translate_rewrites_date_functions():
    query = translate("SELECT strftime('%Y-%m', incident_date) FROM merits WHERE merit_date = date('now')")
    assert query.sql == "SELECT TO_CHAR(incident_date, 'YYYY-MM') FROM merits WHERE merit_date = CURRENT_DATE"


def test_translate_rewrites_substr():
    query = translate("SELECT SUBSTR(first_name, 1, 1), substr(last_name, 2) FROM students")
    assert query.sql == (
        "SELECT SUBSTRING(first_name FROM 1 FOR 1), SUBSTRING(last_name FROM 2) FROM students"
    )


def test_translate_without_markers_passes_params_through():
    query = translate("SELECT 1", [5, 6])
    assert query.sql == "SELECT 1"
    assert query.params == [5, 6]


def test_translate_lenient_mode_drops_extra_params():
    query = translate("SELECT * FROM t WHERE a = ?", [1, 2])
    assert query.sql == "SELECT * FROM t WHERE a = $1"
    assert query.params == [1]


def test_translate_strict_mode_rejects_count_mismatch():
    with pytest.raises(ValidationError):
        translate("SELECT * FROM t WHERE a = ? AND b = ?", [1], strict=True)
    with pytest.raises(ValidationError):
        translate("SELECT 1", [1], strict=True)


def test_translate_leaves_unknown_sql_alone():
    sql = "SELECT id FROM students WHERE last_name ILIKE $1"
    assert translate(sql).sql == sql


def test_to_pyformat_reorders_and_repeats_params():
    sql, params = to_pyformat("SELECT * FROM t WHERE a = $2 OR b = $1 OR c = $2", ["one", "two"])
    assert sql == "SELECT * FROM t WHERE a = %s OR b = %s OR c = %s"
    assert params == ("two", "one", "two")


def test_to_pyformat_escapes_percent_literals():
    sql, params = to_pyformat("SELECT * FROM t WHERE name LIKE 'A%' AND id = $1", [3])
    assert sql == "SELECT * FROM t WHERE name LIKE 'A%%' AND id = %s"
    assert params == (3,)


def test_to_pyformat_without_markers_is_unchanged():
    assert to_pyformat("SELECT 'x%'", []) == ("SELECT 'x%'", ())


def test_to_pyformat_missing_param_raises():
    with pytest.raises(ValidationError):
        to_pyformat("SELECT $2", ["only"])


def test_to_pyformat_ignores_dollar_signs_inside_literals():
    sql, params = to_pyformat("UPDATE t SET note = 'costs $5' WHERE id = $1", [1])
    assert sql == "UPDATE t SET note = 'costs $5' WHERE id = %s"
    assert params == (1,)


def test_to_pyformat_ignores_markers_in_dollar_quotes_identifiers_and_comments():
    sql, params = to_pyformat(
        'SELECT $body$ $2 $body$, "col$3", \'it\'\'s $4\' FROM t WHERE a = $1 -- was $2',
        ["a"],
    )
    assert sql == 'SELECT $body$ $2 $body$, "col$3", \'it\'\'s $4\' FROM t WHERE a = %s -- was $2'
    assert params == ("a",)


def test_literal_with_dollar_and_only_quoted_markers_is_unchanged():
    assert to_pyformat("SELECT 'costs $5'", []) == ("SELECT 'costs $5'", ())


def test_translated_query_with_priced_note_binds_cleanly():
    query = translate("UPDATE t SET note = 'costs $5' WHERE id = ?", [9], strict=True)
    assert to_pyformat(query.sql, query.params) == ("UPDATE t SET note = 'costs $5' WHERE id = %s", (9,))
