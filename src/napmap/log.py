"""TRACE log level for the per-operation events the maps emit.

The stdlib stops at DEBUG. Insert/get events fire on every call, so
they go one level lower where they stay silent unless asked for:

    logging.basicConfig(level=napmap.log.TRACE)

The package never installs handlers; the host application owns logging
configuration.
"""
from __future__ import annotations

import logging

TRACE = 5

logging.addLevelName(TRACE, "TRACE")


def trace(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log at TRACE level. Arguments are only formatted when enabled."""
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, msg, *args)
