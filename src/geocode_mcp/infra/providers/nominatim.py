from __future__ import annotations

import logging
from typing import Any

from geocode_mcp.core.errors import UpstreamError
from geocode_mcp.core.models import GeocodeResult
from geocode_mcp.core.selection import select
from geocode_mcp.core.text import normalize_query
from geocode_mcp.infra.http import HttpClient

log = logging.getLogger(__name__)

NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"


class NominatimClient:
    """
    Nominatim search endpoint (/search)
    - one GET per candidate text, country filter passed as countrycodes
    - every failure (transport, status, JSON, empty answer) comes back as None
    """

    def __init__(
        self,
        *,
        http: HttpClient,
        base_url: str = NOMINATIM_BASE_URL,
        result_limit: int = 3,
    ) -> None:
        self._http = http
        self._search_url = base_url.rstrip("/") + "/search"
        self._result_limit = result_limit

    def build_params(self, text: str, country_filter: str) -> dict[str, Any]:
        return {
            "format": "json",
            "addressdetails": "1",
            "limit": str(self._result_limit),
            "countrycodes": country_filter,
            "q": text,
        }

    async def query(self, text: str, country_filter: str) -> GeocodeResult | None:
        text = normalize_query(text)
        if not text:
            return None

        try:
            payload = await self._http.get_json(self._search_url, params=self.build_params(text, country_filter))
        except UpstreamError as e:
            log.warning("Nominatim request failed for %r: %s", text, e)
            return None

        results = self.parse_results(payload)
        if results is None:
            log.warning("Unexpected Nominatim payload for %r: %.200r", text, payload)
            return None
        if not results:
            log.debug("No results for %r", text)
            return None

        best = select(results, country_filter)
        if not best.is_usable:
            log.debug("Best result for %r has no coordinates", text)
            return None
        return best

    @staticmethod
    def parse_results(payload: Any) -> list[GeocodeResult] | None:
        """
        returns: parsed results, or None when the payload is not a result array
        payload shape (json):
          [ {"lat": "49.6", "lon": "6.1", "display_name": "...", "importance": 0.4,
             "class": "building", "type": "house", ...}, ... ]
        """
        if not isinstance(payload, list):
            return None
        if not all(isinstance(item, dict) for item in payload):
            return None
        return [GeocodeResult.from_payload(item) for item in payload]
