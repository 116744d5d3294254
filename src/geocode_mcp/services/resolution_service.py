from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from geocode_mcp.core.countries import country_filter_for
from geocode_mcp.core.models import GeocodeResult, ResolutionOutcome
from geocode_mcp.core.text import normalize_text
from geocode_mcp.core.validation import diagnose
from geocode_mcp.core.variations import VariationGenerator
from geocode_mcp.infra.cache import LocationLookup

log = logging.getLogger(__name__)


class GeocodeClient(Protocol):
    async def query(self, text: str, country_filter: str) -> GeocodeResult | None: ...


@dataclass(frozen=True)
class ResolverConfig:
    # only serve cached coordinates, never call the backend
    cached_only: bool = False
    backoff_base_ms: int = 200
    backoff_step_ms: int = 100
    backoff_max_ms: int = 1000

    def backoff_seconds(self, attempt_index: int) -> float:
        ms = min(self.backoff_base_ms + attempt_index * self.backoff_step_ms, self.backoff_max_ms)
        return ms / 1000.0


class AddressResolver:
    def __init__(
        self,
        *,
        client: GeocodeClient,
        generator: VariationGenerator,
        cache: LocationLookup | None = None,
        config: ResolverConfig | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._generator = generator
        self._cache = cache
        self._config = config or ResolverConfig()
        self._sleep = sleep

    @property
    def config(self) -> ResolverConfig:
        return self._config

    async def resolve(self, raw_address: str) -> ResolutionOutcome:
        """
        Resolve one raw address to coordinates.

        Cache first; then candidates are tried one at a time, the first usable
        result wins. Backend failures only move the loop to the next
        candidate. Running out of candidates is a failure outcome carrying the
        attempt count, never an exception.
        """
        if not raw_address or not raw_address.strip():
            return ResolutionOutcome.failure(0)

        if self._cache is not None:
            cached = self._cache.lookup(raw_address)
            if cached is not None:
                log.debug("Cache hit for %r", raw_address)
                return ResolutionOutcome.from_cache_entry(raw_address, cached)

        if self._config.cached_only:
            log.debug("Cached-only mode, skipping %r", raw_address)
            return ResolutionOutcome.failure(0)

        if log.isEnabledFor(logging.DEBUG):
            diagnosis = diagnose(raw_address)
            if diagnosis.problems:
                log.debug("Detected issues in %r: %s", raw_address, ", ".join(diagnosis.problems))

        country_filter = country_filter_for(normalize_text(raw_address))
        candidates = self._generator.generate(raw_address)
        total = len(candidates)

        for i, candidate in enumerate(candidates):
            log.info("Attempt %d/%d [%s]: %s", i + 1, total, candidate.strategy, candidate.text)
            result = await self._client.query(candidate.text, country_filter)
            if result is not None and result.is_usable:
                log.info(
                    "Resolved %r via %s (%.4f, %.4f)",
                    raw_address,
                    candidate.strategy,
                    result.latitude,
                    result.longitude,
                )
                return ResolutionOutcome(candidate=candidate, result=result, attempts_made=i + 1)

            if i < total - 1:
                await self._sleep(self._config.backoff_seconds(i))

        log.warning("All %d attempts failed for %r", total, raw_address)
        return ResolutionOutcome.failure(total)
