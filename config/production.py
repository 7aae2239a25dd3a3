import os

from config import env_flag

DATABASE_URL = os.getenv("DATABASE_URL", "")

DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", "30"))
DB_IDLE_TIMEOUT_MS = int(os.getenv("DB_IDLE_TIMEOUT_MS", "30000"))
DB_CONNECTION_TIMEOUT_MS = int(os.getenv("DB_CONNECTION_TIMEOUT_MS", "10000"))
DB_STATEMENT_TIMEOUT_MS = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "15000"))

USE_SUPABASE = env_flag("USE_SUPABASE")
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

BACKUP_DIR = os.getenv("BACKUP_DIR", "/var/backups/school-tenancy")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SQL_DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
