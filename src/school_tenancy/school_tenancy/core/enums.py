from __future__ import annotations

from enum import Enum


class StatementOutcome(str, Enum):
    """Outcome of one template statement during provisioning."""

    APPLIED = "applied"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    FAILED = "failed"


class BackendKind(str, Enum):
    POOLED_SQL = "pg"
    REMOTE_RPC = "supabase"


class TenantStatus(str, Enum):
    """Status stored on public.schools rows."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
