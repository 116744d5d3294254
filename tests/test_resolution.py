from __future__ import annotations

import asyncio

import pytest

from geocode_mcp.core.errors import ValidationError
from geocode_mcp.core.models import CachedLocation, GeocodeResult, ResolutionOutcome
from geocode_mcp.core.text import REPLACEMENT_CHAR
from geocode_mcp.core.variations import VariationGenerator
from geocode_mcp.infra.cache import Cache, LocationCache
from geocode_mcp.services.geocode_service import GeocodeService
from geocode_mcp.services.resolution_service import AddressResolver, ResolverConfig

BELGIAN = "274 Chaussee de Saint Hubert, Vaux-sur-Sure, 6640, Bastogne, Province-de-Luxembourg, Belgium"
BELGIAN_SIMPLE = "274 Chaussee de Saint Hubert, Vaux-sur-Sure, 6640, Belgium"


class FakeClient:
    def __init__(self, answers: dict[str, GeocodeResult] | None = None) -> None:
        self.answers = answers or {}
        self.calls: list[tuple[str, str]] = []

    async def query(self, text: str, country_filter: str) -> GeocodeResult | None:
        self.calls.append((text, country_filter))
        return self.answers.get(text)


class FakeSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def _hit(name: str = "Vaux-sur-Sure, Bastogne, Luxembourg, Wallonie, Belgium") -> GeocodeResult:
    return GeocodeResult(latitude=49.9167, longitude=5.5667, display_name=name, importance=0.4)


def _resolver(
    client: FakeClient,
    *,
    cache: LocationCache | None = None,
    config: ResolverConfig | None = None,
    sleep: FakeSleep | None = None,
) -> AddressResolver:
    return AddressResolver(
        client=client,
        generator=VariationGenerator(),
        cache=cache,
        config=config,
        sleep=sleep or FakeSleep(),
    )


def _locations() -> LocationCache:
    return LocationCache(Cache(maxsize=100, ttl_seconds=60))


def test_first_accepted_candidate_wins():
    client = FakeClient({BELGIAN_SIMPLE: _hit()})
    sleep = FakeSleep()
    outcome = asyncio.run(_resolver(client, sleep=sleep).resolve(BELGIAN))

    assert outcome.ok
    assert outcome.attempts_made == 2
    assert outcome.candidate is not None
    assert outcome.candidate.text == BELGIAN_SIMPLE
    assert outcome.candidate.strategy == "belgian_strip_admin"
    assert outcome.latitude == 49.9167
    assert [text for text, _ in client.calls] == [BELGIAN, BELGIAN_SIMPLE]
    assert {cf for _, cf in client.calls} == {"be"}
    assert sleep.delays == [0.2]


def test_exhaustion_reports_attempts_without_raising():
    client = FakeClient()
    sleep = FakeSleep()
    outcome = asyncio.run(_resolver(client, sleep=sleep).resolve(BELGIAN))

    expected = len(VariationGenerator().generate(BELGIAN))
    assert not outcome.ok
    assert outcome.attempts_made == expected
    assert outcome.candidate is None
    assert outcome.to_dict() == {"ok": False, "attempts_made": expected}
    assert len(client.calls) == expected


def test_backoff_grows_then_caps():
    client = FakeClient()
    sleep = FakeSleep()
    address = f"Hauptstra{REPLACEMENT_CHAR}e 5, Trier, 54290, Trier-Saarburg, Rheinland-Pfalz, Germany"
    asyncio.run(_resolver(client, sleep=sleep).resolve(address))

    n = len(client.calls)
    assert n > 10
    # no sleep after the last attempt
    assert len(sleep.delays) == n - 1
    assert sleep.delays[:3] == [0.2, 0.3, 0.4]
    assert max(sleep.delays) == 1.0
    assert sleep.delays[-1] == 1.0


def test_backoff_is_configurable():
    config = ResolverConfig(backoff_base_ms=50, backoff_step_ms=10, backoff_max_ms=60)
    assert [config.backoff_seconds(i) for i in range(3)] == [0.05, 0.06, 0.06]


def test_cache_short_circuits_network():
    locations = _locations()
    locations.store(BELGIAN, CachedLocation.parse("49.9167", "5.5667", "Vaux-sur-Sure, Belgium"))
    client = FakeClient()

    outcome = asyncio.run(_resolver(client, cache=locations).resolve(BELGIAN))

    assert outcome.ok
    assert outcome.from_cache
    assert outcome.attempts_made == 0
    assert outcome.candidate is not None and outcome.candidate.strategy == "cache"
    assert client.calls == []


def test_cached_only_mode_never_queries():
    client = FakeClient({BELGIAN: _hit()})
    outcome = asyncio.run(_resolver(client, config=ResolverConfig(cached_only=True)).resolve(BELGIAN))

    assert not outcome.ok
    assert outcome.attempts_made == 0
    assert client.calls == []


def test_blank_address_fails_fast():
    client = FakeClient()
    outcome = asyncio.run(_resolver(client).resolve("  "))
    assert outcome == ResolutionOutcome.failure(0)
    assert client.calls == []


def test_unusable_result_is_not_accepted():
    client = FakeClient({BELGIAN: GeocodeResult(latitude=None, longitude=5.5, display_name="half")})
    outcome = asyncio.run(_resolver(client).resolve(BELGIAN))
    assert not outcome.ok


def test_cached_location_rejects_malformed_entries():
    assert CachedLocation.parse(None, "5.5") is None
    assert CachedLocation.parse("abc", "5.5") is None
    assert CachedLocation.parse("nan", "5.5") is None
    entry = CachedLocation.parse(" 49.6 ", 6.1, display_address="  ")
    assert entry is not None
    assert entry.latitude == 49.6
    assert entry.display_address is None


def _service(client: FakeClient, *, batch_sleep: FakeSleep | None = None) -> GeocodeService:
    locations = _locations()
    generator = VariationGenerator()
    resolver = AddressResolver(client=client, generator=generator, cache=locations, sleep=FakeSleep())
    return GeocodeService(
        resolver=resolver,
        generator=generator,
        locations=locations,
        sleep=batch_sleep or FakeSleep(),
    )


def test_service_remembers_resolved_addresses():
    client = FakeClient({BELGIAN_SIMPLE: _hit()})
    service = _service(client)

    async def run() -> tuple[ResolutionOutcome, ResolutionOutcome]:
        return await service.geocode(BELGIAN), await service.geocode(BELGIAN)

    first, second = asyncio.run(run())
    assert first.ok and not first.from_cache
    assert second.ok and second.from_cache
    assert second.candidate is not None and second.candidate.text == BELGIAN_SIMPLE
    assert len(client.calls) == 2


def test_batch_counts_and_never_aborts():
    client = FakeClient({BELGIAN_SIMPLE: _hit()})
    service = _service(client)

    summary = asyncio.run(service.geocode_many([BELGIAN, "Nowhere Lane, Atlantis", BELGIAN]))

    assert summary.total == 3
    assert summary.resolved == 1
    assert summary.failed == 1
    assert summary.cached == 1
    assert [o.ok for o in summary.outcomes] == [True, False, True]
    assert summary.outcomes[1].attempts_made == 1


def test_batch_rejects_empty_list():
    service = _service(FakeClient())
    with pytest.raises(ValidationError):
        asyncio.run(service.geocode_many([]))


def test_batch_pauses_only_after_network_lookups():
    client = FakeClient({BELGIAN_SIMPLE: _hit()})
    batch_sleep = FakeSleep()
    service = _service(client, batch_sleep=batch_sleep)

    # fresh hit, network miss, cache hit, fresh miss (last: no trailing pause)
    asyncio.run(service.geocode_many([BELGIAN, "Nowhere Lane, Atlantis", BELGIAN, "Elsewhere Road, Lemuria"]))

    assert batch_sleep.delays == [0.8, 0.8]


def test_batch_never_pauses_in_cached_only_mode():
    locations = _locations()
    generator = VariationGenerator()
    resolver = AddressResolver(
        client=FakeClient(),
        generator=generator,
        cache=locations,
        config=ResolverConfig(cached_only=True),
        sleep=FakeSleep(),
    )
    batch_sleep = FakeSleep()
    service = GeocodeService(resolver=resolver, generator=generator, locations=locations, sleep=batch_sleep)

    summary = asyncio.run(service.geocode_many([BELGIAN, BELGIAN_SIMPLE]))

    assert summary.failed == 2
    assert batch_sleep.delays == []
