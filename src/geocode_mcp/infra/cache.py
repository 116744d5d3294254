from __future__ import annotations

from typing import Protocol

from cachetools import TTLCache

from geocode_mcp.core.models import CachedLocation, ResolutionOutcome


class LocationLookup(Protocol):
    def lookup(self, address: str) -> CachedLocation | None: ...


class Cache:
    def __init__(self, *, maxsize: int, ttl_seconds: int) -> None:
        self._cache: TTLCache[str, object] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)

    def get(self, key: str) -> object | None:
        return self._cache.get(key)

    def set(self, key: str, value: object) -> None:
        self._cache[key] = value


class LocationCache:
    """Resolved coordinates keyed by the raw address the caller passed in."""

    def __init__(self, cache: Cache) -> None:
        self._cache = cache

    @staticmethod
    def _key(address: str) -> str:
        return f"location:{address.strip()}"

    def lookup(self, address: str) -> CachedLocation | None:
        entry = self._cache.get(self._key(address))
        return entry if isinstance(entry, CachedLocation) else None

    def store(self, address: str, entry: CachedLocation) -> None:
        self._cache.set(self._key(address), entry)

    def remember(self, address: str, outcome: ResolutionOutcome) -> bool:
        if not outcome.ok or outcome.from_cache:
            return False

        entry = CachedLocation.parse(
            outcome.latitude,
            outcome.longitude,
            display_address=outcome.display_name,
            geocode_address=outcome.candidate.text if outcome.candidate else None,
        )
        if entry is None:
            return False
        self.store(address, entry)
        return True
