"""
config.py
---------
Central configuration for tripsmith.
All secrets loaded from environment variables, never hard-coded.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the package root (if it exists) so env vars in that file
# are picked up by os.getenv() below.  Won't override vars already set in the shell.
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── Scheduling ────────────────────────────────────────────────────────────────
DEFAULT_DAY_START: str   = os.getenv("DEFAULT_DAY_START", "08:00")
DEFAULT_NUMBER_OF_PEOPLE: int = int(os.getenv("DEFAULT_NUMBER_OF_PEOPLE", "1"))
MAX_TRIP_DAYS: int       = int(os.getenv("MAX_TRIP_DAYS", "60"))

# ── Units ─────────────────────────────────────────────────────────────────────
# All money values are whole units of CURRENCY_UNIT.
CURRENCY_UNIT: str = os.getenv("CURRENCY_UNIT", "VND")

# ── Weatherbit forecast API (required when USE_STUB_WEATHER=false) ────────────
# Obtain at: https://www.weatherbit.io/account/create
WEATHERBIT_API_KEY: str  = os.getenv("WEATHERBIT_API_KEY", "")
WEATHERBIT_BASE_URL: str = os.getenv("WEATHERBIT_BASE_URL", "https://api.weatherbit.io/v2.0")
WEATHER_REQUEST_TIMEOUT: float = float(os.getenv("WEATHER_REQUEST_TIMEOUT", "10"))
WEATHER_MAX_FORECAST_DAYS: int = int(os.getenv("WEATHER_MAX_FORECAST_DAYS", "16"))

# Stub mode returns a clear-sky forecast and makes no HTTP calls.
USE_STUB_WEATHER: bool = _flag("USE_STUB_WEATHER", "true")

# Seed for the default-weather provider used when a forecast has no data for a
# day.  Empty = nondeterministic.
_seed = os.getenv("WEATHER_RANDOM_SEED", "")
WEATHER_RANDOM_SEED: int | None = int(_seed) if _seed else None

# ── Redis forecast cache ──────────────────────────────────────────────────────
USE_WEATHER_CACHE: bool = _flag("USE_WEATHER_CACHE", "false")
REDIS_HOST: str     = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT: int     = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB: int       = int(os.getenv("REDIS_DB", "0"))
REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")
WEATHER_CACHE_TTL: int = int(os.getenv("WEATHER_CACHE_TTL", "10800"))   # 3 hours

# ── Observability ─────────────────────────────────────────────────────────────
# Empty = <package root>/logs
STRUCTURED_LOGS_DIR: str = os.getenv("STRUCTURED_LOGS_DIR", "")
