"""Exchange-rate resolution and integer minor-unit conversion.

Two resolution policies live here on purpose and must stay different:

* :meth:`RateResolver.resolve_rate` (and :meth:`RateResolver.convert`) fail
  fast with :class:`~fx_ledger.errors.RateNotFound` when neither a direct
  rate, an inverse rate nor a static fallback exists. Treating an unknown
  pair as 1:1 would corrupt financial figures.
* :meth:`RateResolver.resolve_rates_batch` never raises for a missing pair.
  It records ``1.0`` for that pair and logs a warning so that bulk report
  generation survives a single bad data point. The ``1.0`` is a placeholder,
  not a claim of parity.

Both paths use the same chain: identity, direct record, inverse record,
static fallback table. Store failures are never turned into "not found";
they propagate as :class:`~fx_ledger.errors.RateStoreError`.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping

from fx_ledger.db.base_backend import BackendStrategy
from fx_ledger.errors import RateNotFound
from fx_ledger.ingestion.models import CurrencyPair, RateFilter, RateRecord
from fx_ledger.utils.date_range import to_effective_date
from fx_ledger.utils.fallback import build_fallback_table
from fx_ledger.utils.logger import get_logger

LOGGER = get_logger(__name__)

MISSING_PAIR_PLACEHOLDER = 1.0


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3).

    The exact binary value of ``value`` is rounded, so ``1333.333`` becomes
    ``1333`` and ``-1333.5`` becomes ``-1334``.
    """

    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class RateResolver:
    """Resolve rates for currency pairs against a rate store.

    ``fallback_rates`` defaults to the built-in table of well-known pairs;
    pass an empty mapping to disable the static fallback entirely. The
    resolver keeps no state between calls and never writes to the store.
    """

    __slots__ = ("store", "fallback_rates")

    def __init__(
        self,
        store: BackendStrategy,
        *,
        fallback_rates: Mapping[CurrencyPair | str, float] | None = None,
    ) -> None:
        self.store = store
        self.fallback_rates = build_fallback_table(fallback_rates)

    def resolve_rate(
        self,
        base: str,
        quote: str,
        effective_date: date | str | None = None,
    ) -> float:
        """Return how many units of ``quote`` one unit of ``base`` buys.

        Raises :class:`RateNotFound` when nothing resolves.
        """

        if base == quote:
            return 1.0
        rate_date = to_effective_date(effective_date)

        direct = self._latest(RateFilter(rate_date, base=base, quote=quote))
        if direct is not None:
            LOGGER.debug(
                "Resolved %s_%s=%s from record dated %s", base, quote, direct.rate, direct.rate_date
            )
            return direct.rate

        inverse = self._latest(RateFilter(rate_date, base=quote, quote=base))
        if inverse is not None:
            LOGGER.debug(
                "Resolved %s_%s via inverse %s_%s=%s dated %s",
                base,
                quote,
                quote,
                base,
                inverse.rate,
                inverse.rate_date,
            )
            return 1.0 / inverse.rate

        fallback = self._fallback(CurrencyPair(base, quote), rate_date)
        if fallback is not None:
            return fallback
        raise RateNotFound(base, quote, rate_date)

    def resolve_rates_batch(
        self,
        pairs: Iterable[Any],
        effective_date: date | str | None = None,
    ) -> dict[CurrencyPair, float]:
        """Resolve many pairs with at most one store query.

        ``pairs`` may hold :class:`CurrencyPair` objects, ``(from, to)`` tuples
        or ``{"from": ..., "to": ...}`` mappings. Unresolvable pairs map to
        ``1.0`` with a warning instead of raising.
        """

        requested = list(dict.fromkeys(CurrencyPair.coerce(pair) for pair in pairs))
        results: dict[CurrencyPair, float] = {}
        distinct: list[CurrencyPair] = []
        for pair in requested:
            if pair.is_identity:
                results[pair] = 1.0
            else:
                distinct.append(pair)
        if not distinct:
            return results

        rate_date = to_effective_date(effective_date)
        conditions = list(
            dict.fromkeys(cond for pair in distinct for cond in (pair, pair.inverse()))
        )
        rows = self.store.query_rates(RateFilter(rate_date, pairs=tuple(conditions)))
        latest = self._latest_per_pair(rows)

        for pair in distinct:
            direct = latest.get(pair)
            if direct is not None:
                results[pair] = direct.rate
                continue
            inverse = latest.get(pair.inverse())
            if inverse is not None:
                results[pair] = 1.0 / inverse.rate
                continue
            fallback = self._fallback(pair, rate_date)
            if fallback is not None:
                results[pair] = fallback
                continue
            LOGGER.warning(
                "No FX rate for %s on or before %s; using placeholder rate %s",
                pair.key,
                rate_date.isoformat(),
                MISSING_PAIR_PLACEHOLDER,
            )
            results[pair] = MISSING_PAIR_PLACEHOLDER
        return results

    def convert(
        self,
        amount: int,
        from_currency: str,
        to_currency: str,
        effective_date: date | str | None = None,
        *,
        rate_override: float | None = None,
    ) -> int:
        """Convert ``amount`` minor units from one currency to another.

        The product ``amount * rate`` is rounded half away from zero; the
        rate itself is never rounded. ``rate_override`` skips the store, as
        when a user supplies the rate printed on a bank statement.
        """

        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TypeError("amount must be an integer number of minor units")
        if from_currency == to_currency:
            return amount
        if rate_override is not None:
            if rate_override <= 0:
                raise ValueError("rate_override must be positive")
            rate = float(rate_override)
        else:
            rate = self.resolve_rate(from_currency, to_currency, effective_date)
        return round_half_away_from_zero(amount * rate)

    def _latest(self, rate_filter: RateFilter) -> RateRecord | None:
        rows = self.store.query_rates(rate_filter)
        return rows[0] if rows else None

    @staticmethod
    def _latest_per_pair(rows: Iterable[RateRecord]) -> dict[CurrencyPair, RateRecord]:
        latest: dict[CurrencyPair, RateRecord] = {}
        for row in rows:
            # Rows arrive newest first; the first one per pair wins.
            latest.setdefault(row.pair, row)
        return latest

    def _fallback(self, pair: CurrencyPair, rate_date: date) -> float | None:
        rate = self.fallback_rates.get(pair)
        if rate is None:
            return None
        LOGGER.warning(
            "Using static fallback rate %s=%s for %s; the rate store has no record",
            pair.key,
            rate,
            rate_date.isoformat(),
        )
        return rate


__all__ = ["MISSING_PAIR_PLACEHOLDER", "RateResolver", "round_half_away_from_zero"]
