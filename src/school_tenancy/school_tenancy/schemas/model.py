from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.enums import StatementOutcome, TenantStatus


@dataclass(frozen=True)
class Tenant:
    """A school account: the unit of data isolation.

    Rows live in ``public.schools`` and are owned by the CRUD layer.
    """

    tenant_id: int
    code: str
    schema_name: str
    status: TenantStatus = TenantStatus.ACTIVE


@dataclass(frozen=True)
class StatementResult:
    statement: str
    outcome: StatementOutcome
    message: Optional[str] = None


@dataclass(frozen=True)
class SchemaStats:
    active_students: int = 0
    active_teachers: int = 0
    active_classes: int = 0
    incidents_this_month: int = 0
    merits_this_month: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "active_students": self.active_students,
            "active_teachers": self.active_teachers,
            "active_classes": self.active_classes,
            "incidents_this_month": self.incidents_this_month,
            "merits_this_month": self.merits_this_month,
        }


@dataclass(frozen=True)
class LifecycleResult:
    """Outcome of a lifecycle operation. Callers branch on ``success``."""

    success: bool
    schema_name: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    statements: List[StatementResult] = field(default_factory=list)
    file_path: Optional[str] = None
    row_counts: Dict[str, int] = field(default_factory=dict)
    copied_tables: List[str] = field(default_factory=list)
    skipped_tables: List[str] = field(default_factory=list)
    stats: Optional[SchemaStats] = None

    @classmethod
    def failure(cls, error: Exception | str, *, schema_name: Optional[str] = None, **extra: Any) -> "LifecycleResult":
        if isinstance(error, Exception):
            return cls(
                success=False,
                schema_name=schema_name,
                error=str(error),
                error_type=type(error).__name__,
                **extra,
            )
        return cls(success=False, schema_name=schema_name, error=error, **extra)

    def count(self, outcome: StatementOutcome) -> int:
        return sum(1 for s in self.statements if s.outcome == outcome)


@dataclass(frozen=True)
class SeedResult:
    success: bool
    counts: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None
