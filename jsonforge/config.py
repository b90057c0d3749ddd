import logging
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
MODEL_TYPE = os.getenv("MODEL_TYPE", "gemini")
MODEL_NAME = os.getenv("MODEL_NAME", "gemini-2.5-flash")
FALLBACK_MODEL_NAME = os.getenv("FALLBACK_MODEL_NAME", "gpt-4o-mini")
AI_MAX_ATTEMPTS = _env_int("AI_MAX_ATTEMPTS", 3)

RECURSIVE_ENABLED = _env_bool("RECURSIVE_ENABLED", True)
RECURSIVE_MAX_DEPTH = _env_int("RECURSIVE_MAX_DEPTH", 3)
JSON_INDENT = _env_int("JSON_INDENT", 2)
# Deepest array/object nesting that is serialized back to text or HTTP responses
MAX_NESTING_DEPTH = _env_int("MAX_NESTING_DEPTH", 200)

HISTORY_PATH = Path(os.getenv("HISTORY_PATH", Path.home() / ".json_forge" / "history.json"))
HISTORY_MAX_DAYS = _env_int("HISTORY_MAX_DAYS", 7)
HISTORY_MAX_ITEMS = _env_int("HISTORY_MAX_ITEMS", 50)
HISTORY_MIN_LENGTH = _env_int("HISTORY_MIN_LENGTH", 5)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str = None) -> None:
    """Configure root logging once for the API and the UI."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
