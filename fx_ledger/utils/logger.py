"""Logging helpers shared by the resolver and the rate stores."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL_ENV = "FX_LEDGER_LOG_LEVEL"

_configured = False


def get_logger(name: str = "fx_ledger") -> logging.Logger:
    """Return a named logger, configuring the root handler on first use.

    The level defaults to INFO and can be raised or lowered through the
    ``FX_LEDGER_LOG_LEVEL`` environment variable (``DEBUG``, ``WARNING``...).
    """
    global _configured
    if not _configured:
        level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level_name, logging.INFO),
            format=LOG_FORMAT,
        )
        _configured = True
    return logging.getLogger(name)
