"""
Process-wide logging setup.

Feature modules only call `logging.getLogger(__name__)`; this module decides
level and format once, at startup.
"""

from __future__ import annotations

import logging

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


def configure_logging() -> None:
    global _configured
    if _configured:
        return None

    level_name = config.env_str("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    # httpx logs every request at INFO, which drowns out the app logs.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    _configured = True
