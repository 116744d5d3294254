from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from geocode_mcp.core.errors import ValidationError
from geocode_mcp.core.models import AddressDiagnosis, BatchSummary, Candidate, ResolutionOutcome
from geocode_mcp.core.validation import diagnose
from geocode_mcp.core.variations import VariationGenerator
from geocode_mcp.infra.cache import LocationCache
from geocode_mcp.services.resolution_service import AddressResolver

log = logging.getLogger(__name__)


class GeocodeService:
    def __init__(
        self,
        *,
        resolver: AddressResolver,
        generator: VariationGenerator,
        locations: LocationCache,
        batch_delay_ms: int = 800,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._resolver = resolver
        self._generator = generator
        self._locations = locations
        self._batch_delay_seconds = max(0, batch_delay_ms) / 1000
        self._sleep = sleep

    async def geocode(self, address: str) -> ResolutionOutcome:
        """
        Resolve an address and remember the coordinates for later lookups.

        Args:
            address: raw address as scraped

        Returns:
            ResolutionOutcome (``ok`` is False when every candidate failed)
        """
        outcome = await self._resolver.resolve(address)
        if self._locations.remember(address, outcome):
            log.debug("Cached coordinates for %r", address)
        return outcome

    async def geocode_many(self, addresses: Iterable[str]) -> BatchSummary:
        # strictly one address after another; the backend is shared
        outcomes: list[ResolutionOutcome] = []
        resolved = cached = failed = 0

        items = list(addresses)
        if not items:
            raise ValidationError("No addresses given.")

        for i, address in enumerate(items):
            log.info("Geocoding %d/%d: %s", i + 1, len(items), address)
            outcome = await self.geocode(address)
            outcomes.append(outcome)

            if not outcome.ok:
                failed += 1
            elif outcome.from_cache:
                cached += 1
            else:
                resolved += 1

            # pause only after addresses that actually hit the backend
            went_out = not outcome.from_cache and outcome.attempts_made > 0
            if went_out and i < len(items) - 1 and self._batch_delay_seconds:
                await self._sleep(self._batch_delay_seconds)

        log.info("Geocoding completed! Success: %d, Cached: %d, Failed: %d", resolved, cached, failed)
        return BatchSummary(outcomes=outcomes, resolved=resolved, cached=cached, failed=failed)

    def variations(self, address: str) -> list[Candidate]:
        return self._generator.generate(address)

    def diagnose(self, address: str) -> AddressDiagnosis:
        return diagnose(address)
