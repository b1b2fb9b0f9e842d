"""Exceptions raised by fx_ledger."""

from __future__ import annotations

from datetime import date


class RateNotFound(LookupError):
    """No direct, inverse or fallback rate exists for a pair on a date."""

    def __init__(self, base: str, quote: str, rate_date: date) -> None:
        self.base = base
        self.quote = quote
        self.rate_date = rate_date
        super().__init__(
            f"No FX rate found for {base}/{quote} on or before {rate_date.isoformat()}"
        )


class RateStoreError(RuntimeError):
    """The underlying rate store failed (connection, timeout, driver error)."""


__all__ = ["RateNotFound", "RateStoreError"]
