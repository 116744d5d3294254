from __future__ import annotations

from dataclasses import dataclass

from geocode_mcp.app.settings import Settings, get_settings
from geocode_mcp.core.variations import VariationGenerator
from geocode_mcp.infra.cache import Cache, LocationCache
from geocode_mcp.infra.http import HttpClient
from geocode_mcp.infra.providers.nominatim import NominatimClient
from geocode_mcp.services.geocode_service import GeocodeService
from geocode_mcp.services.resolution_service import AddressResolver, ResolverConfig


@dataclass(frozen=True)
class Container:
    settings: Settings
    cache: Cache
    locations: LocationCache
    http: HttpClient
    nominatim: NominatimClient
    generator: VariationGenerator
    resolver: AddressResolver
    geocode_service: GeocodeService


def build_container(settings: Settings | None = None) -> Container:
    settings = settings or get_settings()

    cache = Cache(maxsize=settings.cache_maxsize, ttl_seconds=settings.cache_ttl_seconds)
    locations = LocationCache(cache)
    http = HttpClient(
        timeout_seconds=settings.http_timeout_seconds,
        user_agent=settings.http_user_agent,
        accept_language=settings.nominatim_accept_language,
    )

    nominatim = NominatimClient(
        http=http,
        base_url=settings.nominatim_base_url,
        result_limit=settings.nominatim_result_limit,
    )
    generator = VariationGenerator(max_repair_combinations=settings.max_repair_combinations)

    resolver = AddressResolver(
        client=nominatim,
        generator=generator,
        cache=locations,
        config=ResolverConfig(
            cached_only=settings.cached_only,
            backoff_base_ms=settings.backoff_base_ms,
            backoff_step_ms=settings.backoff_step_ms,
            backoff_max_ms=settings.backoff_max_ms,
        ),
    )
    geocode_service = GeocodeService(
        resolver=resolver,
        generator=generator,
        locations=locations,
        batch_delay_ms=settings.batch_delay_ms,
    )

    return Container(
        settings=settings,
        cache=cache,
        locations=locations,
        http=http,
        nominatim=nominatim,
        generator=generator,
        resolver=resolver,
        geocode_service=geocode_service,
    )
