"""Static fallback rates used when the rate store has no usable record."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from fx_ledger.ingestion.models import CurrencyPair

# Development/degraded-mode safety net only; never a production source of truth.
DEFAULT_FALLBACK_RATES: Mapping[CurrencyPair, float] = MappingProxyType(
    {
        CurrencyPair("USD", "CAD"): 1.35,
        CurrencyPair("CAD", "USD"): 0.74,
        CurrencyPair("EUR", "CAD"): 1.47,
        CurrencyPair("CAD", "EUR"): 0.68,
        CurrencyPair("USD", "EUR"): 0.92,
        CurrencyPair("EUR", "USD"): 1.08,
    }
)


def build_fallback_table(
    rates: Mapping[CurrencyPair | str, float] | None,
) -> Mapping[CurrencyPair, float]:
    """Return a read-only fallback table keyed by :class:`CurrencyPair`.

    ``None`` selects :data:`DEFAULT_FALLBACK_RATES`; an empty mapping disables
    the fallback entirely. String keys use the ``"{base}_{quote}"`` form.
    """

    if rates is None:
        return DEFAULT_FALLBACK_RATES
    table: dict[CurrencyPair, float] = {}
    for key, value in rates.items():
        pair = CurrencyPair.from_key(key) if isinstance(key, str) else CurrencyPair.coerce(key)
        rate = float(value)
        if rate <= 0:
            raise ValueError(f"Fallback rate for {pair.key} must be positive")
        table[pair] = rate
    return MappingProxyType(table)


__all__ = ["DEFAULT_FALLBACK_RATES", "build_fallback_table"]
