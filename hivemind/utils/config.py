"""Load and validate environment variables. Uses python-dotenv.

This module is intentionally thin and side-effect free except for loading `.env`.
Callers should use the accessor functions below rather than reading `os.environ`
directly, to keep environment handling consistent.
"""

from pathlib import Path

from dotenv import load_dotenv
import os

STORE_BACKENDS = ("json", "api", "memory")


def _project_root() -> Path:
    """Resolve project root (the directory holding the hivemind package)."""
    return Path(__file__).resolve().parent.parent.parent


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Existing environment variables win over .env values, so tests can patch them.
    """
    env_path = _project_root() / ".env"
    load_dotenv(env_path, override=False)


def get_required(key: str) -> str:
    """
    Get required env var. Raises if missing or empty.

    Raises:
        ValueError: If key is missing or empty after trimming.
    """
    load_config()
    val = os.getenv(key, "").strip()
    if not val:
        raise ValueError(
            f"Missing required environment variable: {key}. "
            "Set it in .env or export it."
        )
    return val


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_int(key: str, default: int) -> int:
    """Get optional env var as int; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_optional_bool(key: str, default: bool = False) -> bool:
    """Get optional env var as bool (1/true/yes/on); default if missing."""
    load_config()
    raw = os.getenv(key, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# --- Public config accessors ---

def store_backend() -> str:
    """Optional: data store backend. One of json (default), api, memory."""
    val = get_optional("HIVEMIND_STORE", "json").lower()
    if val not in STORE_BACKENDS:
        raise ValueError(
            f"Unsupported HIVEMIND_STORE={val!r}; expected one of {', '.join(STORE_BACKENDS)}"
        )
    return val


def data_dir() -> Path:
    """Directory for the JSON file store. Default <root>/data/store."""
    val = get_optional("HIVEMIND_DATA_DIR", "")
    if val:
        return Path(val).expanduser()
    return _project_root() / "data" / "store"


def api_url() -> str:
    """Base URL of the json-server style API. Default http://localhost:3001."""
    return get_optional("HIVEMIND_API_URL", "http://localhost:3001").rstrip("/")


def api_timeout() -> int:
    """Seconds to wait on each API request. Default 10."""
    return get_optional_int("HIVEMIND_API_TIMEOUT", 10)


def default_task_points() -> int:
    """Points a task carries when none are given. Default 10."""
    return get_optional_int("HIVEMIND_DEFAULT_TASK_POINTS", 10)


def log_level() -> str:
    """Logging level name. Default INFO."""
    return get_optional("HIVEMIND_LOG_LEVEL", "INFO").upper()


def log_file() -> Path | None:
    """Optional log file path. Default: stderr only."""
    val = get_optional("HIVEMIND_LOG_FILE", "")
    return Path(val).expanduser() if val else None


def seed_demo() -> bool:
    """Seed demo data into an empty store on startup. Default off."""
    return get_optional_bool("HIVEMIND_SEED_DEMO", False)


def project_root() -> Path:
    """Project root directory."""
    return _project_root()
