import os

from dotenv import load_dotenv

load_dotenv()

SERVICE_NAME = os.getenv("SERVICE_NAME", "stay-ledger")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# "json" or "console"; unset means console when debugging, JSON otherwise.
LOG_FORMAT = os.getenv("LOG_FORMAT", "console" if LOG_LEVEL == "DEBUG" else "json").lower()

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "20"))
DB_POOL_RECYCLE_SECONDS = int(os.getenv("DB_POOL_RECYCLE_SECONDS", "3600"))

_origins = os.getenv("ALLOWED_ORIGINS")
if not _origins:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [origin.strip() for origin in _origins.split(",") if origin.strip()]

# Role gating happens in the HTTP layer; the services never look at roles.
STAY_MANAGER_ROLES: frozenset[str] = frozenset({"OWNER", "MANAGER", "RECEPTIONIST"})
FINANCE_MANAGER_ROLES: frozenset[str] = frozenset({"OWNER", "MANAGER"})
