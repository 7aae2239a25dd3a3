"""Translate legacy ``?``-placeholder SQL into PostgreSQL.

Upper layers write queries once with ``?`` markers and a few SQLite date/string
functions; both backends run them through :func:`translate` before execution.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Sequence

from ..core.exceptions import ValidationError

_FUNCTION_REWRITES = (
    (re.compile(r"\bdatetime\('now'\)", re.IGNORECASE), "CURRENT_TIMESTAMP"),
    (re.compile(r"\bdate\('now'\)", re.IGNORECASE), "CURRENT_DATE"),
    (re.compile(r"\bstrftime\('%Y-%m',\s*(\w+)\)", re.IGNORECASE), r"TO_CHAR(\1, 'YYYY-MM')"),
    # SQLite SUBSTR and PostgreSQL SUBSTRING are both 1-based.
    (re.compile(r"\bSUBSTR\(([^,()]+),\s*(\d+)\)", re.IGNORECASE), r"SUBSTRING(\1 FROM \2)"),
    (re.compile(r"\bSUBSTR\(([^,()]+),\s*(\d+),\s*(\d+)\)", re.IGNORECASE), r"SUBSTRING(\1 FROM \2 FOR \3)"),
)


@dataclass(frozen=True)
class TranslatedQuery:
    sql: str
    params: List[Any]


def translate(sql: str, params: Sequence[Any] | None = None, *, strict: bool = False) -> TranslatedQuery:
    """Rewrite ``sql`` for PostgreSQL and pick the params its markers consume.

    Each ``?`` becomes ``$1``, ``$2``, ... from left to right. When the query has
    no marker at all, ``params`` is returned unchanged whatever its length. With
    ``strict`` a count mismatch raises :class:`ValidationError` instead.
    """
    source = list(params or [])
    bound: list[Any] = []
    counter = 0

    def _next_marker(_match: re.Match) -> str:
        nonlocal counter
        counter += 1
        if counter <= len(source):
            bound.append(source[counter - 1])
        return f"${counter}"

    native = re.sub(r"\?", _next_marker, sql)

    if strict and counter != len(source):
        raise ValidationError(f"Query has {counter} placeholder(s) but {len(source)} parameter(s) were given")

    for pattern, replacement in _FUNCTION_REWRITES:
        native = pattern.sub(replacement, native)

    return TranslatedQuery(sql=native, params=bound if bound else source)
