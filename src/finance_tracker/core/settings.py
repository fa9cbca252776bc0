import os
from collections.abc import Callable
from typing import TypeVar

from dotenv import find_dotenv, load_dotenv

from finance_tracker.logger import get_logger

logger = get_logger(__name__)

Number = TypeVar("Number", int, float)

CONFIG_FILENAME = "config.yaml"

CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_ACCESS_TOKEN",
    "SUPABASE_CATEGORIES_TTL",
    "TRANSACTIONS_PAGE_SIZE",
    "TRENDS_DAYS",
)

_SENSITIVE_MARKERS = ("KEY", "TOKEN", "SECRET", "PASSWORD", "AUTH", "PRIVATE")


def _config_candidates() -> list[str]:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        return [os.path.join(config_dir, CONFIG_FILENAME)]
    cwd = os.getcwd()
    return [os.path.join(cwd, "config", CONFIG_FILENAME), os.path.join(cwd, CONFIG_FILENAME)]


def _parse_config_value(raw_value: str) -> str:
    value = raw_value.strip()
    if value[:1] in {'"', "'"}:
        quote = value[0]
        closing = value.find(quote, 1)
        if closing > 0:
            return value[1:closing]
    return value.split("#", 1)[0].strip()


def read_config_file(path: str | None) -> dict[str, str]:
    """Read flat `KEY: value` pairs; comments and blank values are skipped."""
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = _parse_config_value(raw_value)
            if key.strip() and value:
                values[key.strip()] = value
    return values


def load_environment() -> None:
    """Environment wins over `.env`, which wins over config.yaml."""
    config_dir = os.getenv("CONFIG_DIR")
    dotenv_path = os.path.join(config_dir, ".env") if config_dir else ""
    if not os.path.exists(dotenv_path):
        dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    config_path = next((path for path in _config_candidates() if os.path.exists(path)), None)
    file_values = read_config_file(config_path)
    for key in CONFIG_KEYS:
        if key not in os.environ and key in file_values:
            os.environ[key] = file_values[key]


def _get_env_number(
    name: str,
    default: Number,
    parse: Callable[[str], Number],
    min_value: Number | None,
) -> Number:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = parse(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("[ENV] %s='%s' below minimum %s, using default %s.", name, raw, min_value, default)
        return default
    return value


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    return _get_env_number(name, default, int, min_value)


def get_env_float(name: str, default: float, min_value: float | None = None) -> float:
    return _get_env_number(name, default, float, min_value)


def mask_env_value(name: str, value: str) -> str:
    sanitized = value.replace("\r", "\\r").replace("\n", "\\n")
    # Supabase anon and service keys are JWTs.
    looks_secret = sanitized.startswith(("Bearer ", "bearer ")) or (
        sanitized.startswith("eyJ") and sanitized.count(".") == 2
    )
    if not looks_secret and not any(marker in name.upper() for marker in _SENSITIVE_MARKERS):
        return sanitized
    if len(sanitized) <= 4:
        return "****"
    return f"{sanitized[:2]}...{sanitized[-2:]}"


def log_environment() -> None:
    logger.info("[ENV] Logging configured environment variables (masked where needed).")
    for key in CONFIG_KEYS:
        raw_value = os.getenv(key)
        value = "<unset>" if raw_value is None else mask_env_value(key, raw_value)
        logger.info("[ENV] %s=%s", key, value)


load_environment()

TRANSACTIONS_PAGE_SIZE = get_env_int("TRANSACTIONS_PAGE_SIZE", 50, min_value=1)
TRENDS_DAYS = get_env_int("TRENDS_DAYS", 7, min_value=1)
