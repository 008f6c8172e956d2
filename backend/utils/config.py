"""Configuration from environment."""
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


PORT = int(os.environ.get("PORT", "8001"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# When TESTING=true, use test DB URL so tests never touch production.
if os.environ.get("TESTING") == "true":
    DATABASE_URL = os.environ.get("TESTING_DATABASE_URL", "sqlite:///:memory:")
else:
    DATABASE_URL = os.environ.get(
        "DATABASE_URL",
        "sqlite:///./locations.db",
    )

DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "5"))
# Seconds to wait for a pooled connection before giving up (surfaces as a timeout).
DB_POOL_TIMEOUT = float(os.environ.get("DB_POOL_TIMEOUT", "30"))
DB_ECHO = _env_bool("DB_ECHO", False)

# Create missing tables on startup. There is no migration tooling.
AUTO_CREATE_SCHEMA = _env_bool("AUTO_CREATE_SCHEMA", True)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "http://localhost:8080,http://127.0.0.1:8080").split(",")
    if origin.strip()
]
