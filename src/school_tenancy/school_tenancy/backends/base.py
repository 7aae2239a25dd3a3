from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..core.enums import BackendKind


@dataclass(frozen=True)
class RunResult:
    id: Any
    changes: int


class DatabaseBackend(ABC):
    """Strategy Pattern: one data-access contract, two implementations.

    Callers pass ``?``-placeholder SQL and never see the native dialect.
    """

    kind: BackendKind

    @abstractmethod
    def init(self) -> None:
        """Check connectivity at startup; raise when the backend is unusable."""

    @abstractmethod
    def run(self, sql: str, params: Sequence[Any] = (), *, schema_name: Optional[str] = None) -> RunResult:
        raise NotImplementedError

    @abstractmethod
    def get(self, sql: str, params: Sequence[Any] = (), *, schema_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def all(self, sql: str, params: Sequence[Any] = (), *, schema_name: Optional[str] = None) -> List[Dict[str, Any]]:
        raise NotImplementedError


def extract_row_id(row: Optional[Dict[str, Any]]) -> Any:
    """Id from a ``RETURNING`` row: the ``id`` column, else the first integer column."""
    if not row:
        return None
    for key in ("id", "ID"):
        if key in row:
            return row[key]
    first = next(iter(row.values()), None)
    if isinstance(first, int) and not isinstance(first, bool):
        return first
    return None
