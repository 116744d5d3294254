from __future__ import annotations

import os

import pytest

from geocode_mcp.app.settings import get_settings

# NOTE:
# - live Nominatim calls depend on the network and the public rate limit, so
#   they only run when GEOCODE_LIVE_TESTS=1.


def _live() -> bool:
    return os.getenv("GEOCODE_LIVE_TESTS") == "1"


def test_import_server():
    import geocode_mcp.server  # noqa: F401


def test_server_logs_bad_settings(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture):
    import importlib
    import sys

    monkeypatch.setenv("HTTP_USER_AGENT", " ")
    monkeypatch.delitem(sys.modules, "geocode_mcp.server", raising=False)

    with pytest.raises(RuntimeError):
        importlib.import_module("geocode_mcp.server")
    assert "Failed to register geocode tools" in caplog.text


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "HTTP_USER_AGENT",
        "GEOCODE_CACHED_ONLY",
        "HTTP_TIMEOUT_SECONDS",
        "NOMINATIM_RESULT_LIMIT",
        "GEOCODE_BATCH_DELAY_MS",
    ):
        monkeypatch.delenv(name, raising=False)

    s = get_settings()
    assert s.http_user_agent == "geocode-mcp/0.1.0"
    assert s.cached_only is False
    assert s.http_timeout_seconds == 15.0
    assert s.nominatim_result_limit == 3
    assert (s.backoff_base_ms, s.backoff_step_ms, s.backoff_max_ms) == (200, 100, 1000)
    assert s.batch_delay_ms == 800


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GEOCODE_CACHED_ONLY", "true")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "'10'")
    s = get_settings()
    assert s.cached_only is True
    assert s.http_timeout_seconds == 10.0


def test_blank_user_agent_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HTTP_USER_AGENT", "  ")
    with pytest.raises(RuntimeError):
        get_settings()


def test_container_wires_cached_only(monkeypatch: pytest.MonkeyPatch):
    from geocode_mcp.app.container import build_container

    monkeypatch.setenv("GEOCODE_CACHED_ONLY", "yes")
    c = build_container()
    assert c.resolver.config.cached_only is True


@pytest.mark.skipif(not _live(), reason="GEOCODE_LIVE_TESTS is not set")
def test_live_resolve_belgian_address():
    import asyncio

    from geocode_mcp.app.container import build_container

    c = build_container()

    async def run():
        try:
            return await c.geocode_service.geocode(
                "274 Chaussee de Saint Hubert, Vaux-sur-Sure, 6640, Bastogne, Province-de-Luxembourg, Belgium"
            )
        finally:
            await c.http.aclose()

    outcome = asyncio.run(run())
    assert outcome.ok
    assert 49.0 < outcome.latitude < 51.0
