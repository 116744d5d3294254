from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    # Nominatim
    nominatim_base_url: str
    nominatim_result_limit: int
    nominatim_accept_language: str

    # Resolution
    cached_only: bool
    backoff_base_ms: int
    backoff_step_ms: int
    backoff_max_ms: int
    max_repair_combinations: int
    batch_delay_ms: int

    # Cache
    cache_ttl_seconds: int
    cache_maxsize: int

    # HTTP
    http_timeout_seconds: float
    http_user_agent: str

    # Logging
    log_level: str


def _clean(s: str | None) -> str:
    return (s or "").strip().strip('"').strip("'")


def _int(name: str, default: int) -> int:
    v = _clean(os.getenv(name, str(default)))
    return int(v)


def _float(name: str, default: float) -> float:
    v = _clean(os.getenv(name, str(default)))
    return float(v)


def _bool(name: str, default: bool) -> bool:
    v = _clean(os.getenv(name, "true" if default else "false")).lower()
    return v in ("1", "true", "yes", "y", "on")


def get_settings() -> Settings:
    """
    Nominatim's usage policy rejects anonymous clients, so the
    User-Agent may not be blanked out.
    """
    user_agent = _clean(os.getenv("HTTP_USER_AGENT", "geocode-mcp/0.1.0"))
    if not user_agent:
        raise RuntimeError("HTTP_USER_AGENT must not be empty (Nominatim usage policy).")

    return Settings(
        # nominatim
        nominatim_base_url=_clean(os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")),
        nominatim_result_limit=_int("NOMINATIM_RESULT_LIMIT", 3),
        nominatim_accept_language=_clean(os.getenv("NOMINATIM_ACCEPT_LANGUAGE", "en,fr,de,nl")),
        # resolution
        cached_only=_bool("GEOCODE_CACHED_ONLY", False),
        backoff_base_ms=_int("GEOCODE_BACKOFF_BASE_MS", 200),
        backoff_step_ms=_int("GEOCODE_BACKOFF_STEP_MS", 100),
        backoff_max_ms=_int("GEOCODE_BACKOFF_MAX_MS", 1000),
        max_repair_combinations=_int("GEOCODE_MAX_REPAIR_COMBINATIONS", 12),
        batch_delay_ms=_int("GEOCODE_BATCH_DELAY_MS", 800),
        # cache
        cache_ttl_seconds=_int("GEOCODE_CACHE_TTL_SECONDS", 60 * 60 * 24 * 7),
        cache_maxsize=_int("GEOCODE_CACHE_MAXSIZE", 20000),
        # http
        http_timeout_seconds=_float("HTTP_TIMEOUT_SECONDS", 15.0),
        http_user_agent=user_agent,
        # logging
        log_level=_clean(os.getenv("LOG_LEVEL", "INFO")).upper() or "INFO",
    )
