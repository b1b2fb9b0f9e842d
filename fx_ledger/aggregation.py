"""Multi-currency totals built on a single batch rate lookup."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from fx_ledger.ingestion.models import CurrencyPair
from fx_ledger.resolver import RateResolver, round_half_away_from_zero


@dataclass(frozen=True, slots=True)
class MoneyAmount:
    """An integer amount of minor units in ``currency``."""

    amount: int
    currency: str


def convert_amounts(
    resolver: RateResolver,
    amounts: Iterable[MoneyAmount],
    target_currency: str,
    effective_date: date | str | None = None,
) -> list[int]:
    """Convert every amount into ``target_currency`` with one batch lookup.

    Each amount is rounded on its own before any summing. Pairs the batch
    cannot resolve follow the batch policy and convert at ``1.0``.
    """

    items = list(amounts)
    for item in items:
        if isinstance(item.amount, bool) or not isinstance(item.amount, int):
            raise TypeError("amount must be an integer number of minor units")
    rates = resolver.resolve_rates_batch(
        [CurrencyPair(item.currency, target_currency) for item in items],
        effective_date,
    )
    converted: list[int] = []
    for item in items:
        if item.currency == target_currency:
            converted.append(item.amount)
        else:
            rate = rates[CurrencyPair(item.currency, target_currency)]
            converted.append(round_half_away_from_zero(item.amount * rate))
    return converted


def total_in_currency(
    resolver: RateResolver,
    amounts: Iterable[MoneyAmount],
    target_currency: str,
    effective_date: date | str | None = None,
) -> int:
    """Sum ``amounts`` in ``target_currency``."""

    return sum(convert_amounts(resolver, amounts, target_currency, effective_date))


__all__ = ["MoneyAmount", "convert_amounts", "total_in_currency"]
