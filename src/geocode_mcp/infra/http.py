from __future__ import annotations

import logging
from typing import Any

import httpx

from geocode_mcp.core.errors import UpstreamError

log = logging.getLogger(__name__)


class HttpClient:
    def __init__(
        self,
        *,
        timeout_seconds: float,
        user_agent: str,
        accept_language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"User-Agent": user_agent}
        if accept_language:
            headers["Accept-Language"] = accept_language
        self._client = httpx.AsyncClient(timeout=timeout_seconds, headers=headers, transport=transport)

    async def get_json(self, url: str, *, params: dict[str, Any]) -> Any:
        try:
            r = await self._client.get(url, params=params)
            r.raise_for_status()
            return r.json()
        except httpx.HTTPError as e:
            log.warning("HTTP error: %s", e)
            raise UpstreamError(f"Upstream HTTP error: {e}") from e
        except ValueError as e:
            log.warning("Malformed JSON from %s: %s", url, e)
            raise UpstreamError(f"Upstream returned malformed JSON: {e}") from e

    async def aclose(self) -> None:
        try:
            await self._client.aclose()
        except httpx.HTTPError:
            # nothing left to do at shutdown
            pass
