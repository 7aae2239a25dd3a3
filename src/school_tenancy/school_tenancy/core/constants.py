"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SCHEMA_PREFIX = "school_"
PUBLIC_SCHEMA = "public"
SCHEMA_NAME_TOKEN = "{SCHEMA_NAME}"
MAX_IDENTIFIER_LENGTH = 63

# Table used to decide whether a schema still holds tenant data.
DATA_GUARD_TABLE = "students"
IDENTITY_COLUMN = "id"
# Tenant-specific tables that a clone must not carry over.
CLONE_EXCLUDED_TABLES = frozenset({"settings", "customizations"})

SCHOOL_TEMPLATE_FILE = "school_schema_template.sql"
PUBLIC_INIT_FILE = "init_multi_tenant.sql"

DEFAULT_POOL_MAX = 30
DEFAULT_IDLE_TIMEOUT_MS = 30_000
DEFAULT_CONNECTION_TIMEOUT_MS = 10_000
DEFAULT_STATEMENT_TIMEOUT_MS = 15_000

SCHEMA_CACHE_TTL_SECONDS = 5 * 60
