from __future__ import annotations

import re

import pytest

from src.school_tenancy.school_tenancy.common.validators import is_valid_schema_format, require_tenant_schema
from src.school_tenancy.school_tenancy.core.exceptions import ValidationError
from src.school_tenancy.school_tenancy.schemas.naming import generate_schema_name

PATTERN = re.compile(r"^school_[a-z][a-z0-9_]*$")


def test_generate_schema_name_lowercases_code():
    assert generate_schema_name("WS2025") == "school_ws2025"


def test_generate_schema_name_prefixes_leading_digit():
    assert generate_schema_name("2025B") == "school_s2025b"


@pytest.mark.parametrize(
    "code, expected",
    [
        ("St. Mary's", "school_st__mary_s"),
        ("north-side", "school_north_side"),
        ("_hidden", "school_s_hidden"),
        ("", "school_s"),
        ("école", "school_s_cole"),
    ],
)
def test_generate_schema_name_replaces_unsafe_characters(code, expected):
    assert generate_schema_name(code) == expected


@pytest.mark.parametrize("code", ["WS2025", "2025B", "a b c", "x;DROP TABLE y", "ÄÖÜ", "___", "9"])
def test_generated_names_are_safe_identifiers(code):
    name = generate_schema_name(code)
    assert PATTERN.match(name)
    assert generate_schema_name(code) == name


def test_generate_schema_name_on_its_own_output_keeps_the_tail():
    once = generate_schema_name("WS2025")
    twice = generate_schema_name(once)
    assert twice == "school_" + once


def test_schema_format_checks():
    assert is_valid_schema_format("school_ws2025")
    assert not is_valid_schema_format("public")
    assert not is_valid_schema_format("school_WS")
    assert not is_valid_schema_format('school_x"; drop')
    assert not is_valid_schema_format("school_" + "a" * 60)
    assert not is_valid_schema_format("")


def test_require_tenant_schema_rejects_public():
    with pytest.raises(ValidationError):
        require_tenant_schema("public")
    assert require_tenant_schema("school_ok") == "school_ok"
