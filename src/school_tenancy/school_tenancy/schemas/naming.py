from __future__ import annotations

import re

from ..core.constants import SCHEMA_PREFIX

_INVALID_CHARS = re.compile(r"[^a-z0-9_]")


def generate_schema_name(school_code: str) -> str:
    """Map a school code to its schema name, e.g. ``"WS2025"`` -> ``"school_ws2025"``.

    Lowercases, replaces every character outside ``[a-z0-9_]`` with ``_`` and
    prefixes ``s`` when the result does not start with a letter (``"2025B"`` ->
    ``"school_s2025b"``). Applying it to its own output only adds the prefix again,
    the tail stays unchanged.
    """
    sanitized = _INVALID_CHARS.sub("_", str(school_code).lower())
    if not sanitized or not ("a" <= sanitized[0] <= "z"):
        sanitized = f"s{sanitized}"
    return f"{SCHEMA_PREFIX}{sanitized}"
