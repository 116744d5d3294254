from __future__ import annotations

import logging
import os
import sys


def configure_logging(level: str | None = None) -> None:
    # stdout carries the MCP stdio transport, so logs go to stderr
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # one line per request from httpx is noise next to the attempt log
    logging.getLogger("httpx").setLevel(logging.WARNING)
