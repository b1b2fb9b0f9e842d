"""Helpers for working with the local SQLite rate store."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_SQLITE_DB_PATH", "bundled_sqlite_path"]

# Resolved relative to this module so the location does not depend on the
# working directory; SQLite needs an absolute path once installed.
DEFAULT_SQLITE_DB_PATH: Final[Path] = Path(__file__).resolve().with_name("fx_rates.db")


def bundled_sqlite_path() -> Path:
    """Return the absolute path to the default ``fx_rates.db`` file."""

    return DEFAULT_SQLITE_DB_PATH
