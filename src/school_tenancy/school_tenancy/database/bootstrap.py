from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from ..core.constants import SCHEMA_NAME_TOKEN

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def load_sql_file(name: str, *, templates_dir: Optional[Path] = None) -> str:
    path = Path(templates_dir or TEMPLATES_DIR) / name
    return path.read_text(encoding="utf-8")


def render_template(sql: str, schema_name: str) -> str:
    """Replace every schema-name token in the template."""
    return sql.replace(SCHEMA_NAME_TOKEN, schema_name)


def _skip_line_comment(sql: str, i: int) -> int:
    end = sql.find("\n", i)
    return len(sql) if end == -1 else end


def _is_tag_name(name: str) -> bool:
    # $tag$ names follow identifier rules; "$1" style markers are not tags.
    return bool(name) and (name[0].isalpha() or name[0] == "_") and name.replace("_", "").isalnum()


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for template files (handles ';' inside quotes, dollar
    # quoted bodies and '--' comments).
    buf: list[str] = []
    in_single = False
    in_double = False
    dollar_tag: Optional[str] = None
    i = 0
    n = len(sql)

    while i < n:
        ch = sql[i]

        if dollar_tag is not None:
            if sql.startswith(dollar_tag, i):
                buf.append(dollar_tag)
                i += len(dollar_tag)
                dollar_tag = None
                continue
            buf.append(ch)
            i += 1
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif not in_single and not in_double:
            if ch == "-" and sql.startswith("--", i):
                i = _skip_line_comment(sql, i)
                continue
            if ch == "$":
                end = sql.find("$", i + 1)
                tag = sql[i : end + 1] if end != -1 else ""
                if tag and (tag == "$$" or _is_tag_name(tag[1:-1])):
                    dollar_tag = tag
                    buf.append(tag)
                    i = end + 1
                    continue
            if ch == ";":
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                i += 1
                continue

        buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail
