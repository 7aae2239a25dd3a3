from __future__ import annotations

import re

from ..core.constants import MAX_IDENTIFIER_LENGTH, PUBLIC_SCHEMA
from ..core.exceptions import ValidationError

_SCHEMA_PATTERN = re.compile(r"^school_[a-z0-9_]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def is_valid_schema_format(schema_name: str) -> bool:
    """True when the name is a tenant schema identifier safe to interpolate."""
    if not schema_name or not isinstance(schema_name, str):
        return False
    return bool(_SCHEMA_PATTERN.match(schema_name)) and len(schema_name) <= MAX_IDENTIFIER_LENGTH


def require_tenant_schema(schema_name: str) -> str:
    if schema_name == PUBLIC_SCHEMA:
        raise ValidationError("Cannot use public schema as a tenant schema")
    if not is_valid_schema_format(schema_name):
        raise ValidationError(f"Invalid schema name format: {schema_name!r}")
    return schema_name
