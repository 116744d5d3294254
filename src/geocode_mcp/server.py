from __future__ import annotations

import logging

from fastmcp import FastMCP

from geocode_mcp.app.container import build_container
from geocode_mcp.app.logger import configure_logging
from geocode_mcp.tools.geocode_tools import register_geocode_tools

# LOG_LEVEL is read from the environment here; settings are validated below
configure_logging()
log = logging.getLogger(__name__)

mcp = FastMCP("geocode-mcp")

try:
    _container = build_container()
    register_geocode_tools(mcp, _container)
    log.info("Geocode tools registered successfully")
except Exception as e:
    log.error("Failed to register geocode tools: %s", e, exc_info=True)
    raise


if __name__ == "__main__":
    mcp.run(
        transport="http",
        host="127.0.0.1",
        port=3335,
        path="/mcp",
    )
