import os
from pathlib import Path
from dotenv import load_dotenv

# Override=True so edits to backend/.env win over stale process environment on reload.
#
# Tests point DATABASE_URL at a temporary SQLite file; set DISABLE_DOTENV=1 so a
# developer's .env cannot override it.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)


def _env_flag(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or default).strip() in {"1", "true", "True", "yes", "YES"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# Local SQLite by default so the API boots without any setup.
# Absolute path so it works regardless of current working directory.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

# Auth / JWT
# NOTE: keep a default for local dev so the server can boot even if SECRET_KEY isn't set.
SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_change_me")
ACCESS_TOKEN_EXPIRE_MINUTES = _env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24)

# Role allowed to move candidates between statuses.
PRIVILEGED_ROLE = (os.getenv("PRIVILEGED_ROLE") or "admin").strip().lower()
# Public signup must not hand out the privileged role unless explicitly enabled.
ALLOW_ADMIN_SIGNUP = _env_flag("ALLOW_ADMIN_SIGNUP")

# Listing
DEFAULT_PAGE_LIMIT = _env_int("DEFAULT_PAGE_LIMIT", 25)
MAX_PAGE_LIMIT = _env_int("MAX_PAGE_LIMIT", 100)
MAX_PAGE = _env_int("MAX_PAGE", 10000)

# Resume uploads (held in memory, never written to disk)
MAX_RESUME_BYTES = _env_int("MAX_RESUME_BYTES", 5_000_000)

# Comma separated list of extra CORS origins.
FRONTEND_ORIGINS = os.getenv("FRONTEND_ORIGINS", "")

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
