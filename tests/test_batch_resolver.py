"""Batch resolution: one store round-trip and degraded continuation."""

from __future__ import annotations

import logging
from datetime import date
from typing import Sequence
from unittest import mock

import pytest

from fx_ledger.db.memory_backend import InMemoryBackend
from fx_ledger.errors import RateNotFound, RateStoreError
from fx_ledger.ingestion.models import CurrencyPair, RateFilter, RateRecord
from fx_ledger.resolver import RateResolver

ON = date(2024, 6, 1)

ROWS = [
    RateRecord(base="USD", quote="CAD", rate_date=date(2024, 1, 1), rate=1.35),
    RateRecord(base="USD", quote="CAD", rate_date=date(2024, 5, 1), rate=1.37),
    RateRecord(base="USD", quote="CAD", rate_date=date(2024, 7, 1), rate=1.40),
    RateRecord(base="EUR", quote="USD", rate_date=date(2024, 2, 1), rate=1.10),
    RateRecord(base="GBP", quote="JPY", rate_date=date(2024, 4, 1), rate=190.0),
]


def _store(rows: Sequence[RateRecord] = ROWS) -> mock.MagicMock:
    return mock.MagicMock(wraps=InMemoryBackend(rows))


def test_batch_issues_exactly_one_query_for_many_pairs() -> None:
    store = _store()
    resolver = RateResolver(store, fallback_rates={})

    result = resolver.resolve_rates_batch(
        [("USD", "CAD"), ("CAD", "USD"), ("USD", "EUR"), ("JPY", "GBP"), ("AUD", "NZD")],
        ON,
    )

    assert store.query_rates.call_count == 1
    assert result[CurrencyPair("USD", "CAD")] == 1.37
    assert result[CurrencyPair("CAD", "USD")] == pytest.approx(1 / 1.37)
    assert result[CurrencyPair("USD", "EUR")] == pytest.approx(1 / 1.10)
    assert result[CurrencyPair("JPY", "GBP")] == pytest.approx(1 / 190.0)
    assert result[CurrencyPair("AUD", "NZD")] == 1.0


def test_batch_query_covers_direct_and_inverse_conditions() -> None:
    store = _store()
    resolver = RateResolver(store)

    resolver.resolve_rates_batch([CurrencyPair("USD", "CAD"), CurrencyPair("EUR", "USD")], ON)

    (rate_filter,), _ = store.query_rates.call_args
    assert isinstance(rate_filter, RateFilter)
    assert rate_filter.date_on_or_before == ON
    assert set(rate_filter.pairs) == {
        CurrencyPair("USD", "CAD"),
        CurrencyPair("CAD", "USD"),
        CurrencyPair("EUR", "USD"),
        CurrencyPair("USD", "EUR"),
    }


def test_batch_with_only_identity_pairs_skips_store() -> None:
    store = _store()
    resolver = RateResolver(store)

    result = resolver.resolve_rates_batch([("USD", "USD"), {"from": "CAD", "to": "CAD"}], ON)

    assert store.query_rates.call_count == 0
    assert result == {CurrencyPair("USD", "USD"): 1.0, CurrencyPair("CAD", "CAD"): 1.0}


def test_empty_batch_returns_empty_mapping() -> None:
    store = _store()

    assert RateResolver(store).resolve_rates_batch([], ON) == {}
    assert store.query_rates.call_count == 0


def test_batch_mixes_identity_and_distinct_pairs() -> None:
    store = _store()
    resolver = RateResolver(store)

    result = resolver.resolve_rates_batch(
        [{"from": "USD", "to": "USD"}, {"from": "USD", "to": "CAD"}], ON
    )

    assert store.query_rates.call_count == 1
    assert result[CurrencyPair("USD", "USD")] == 1.0
    assert result[CurrencyPair("USD", "CAD")] == 1.37


def test_batch_never_raises_for_unresolvable_pair(caplog: pytest.LogCaptureFixture) -> None:
    resolver = RateResolver(_store(), fallback_rates={})

    with caplog.at_level(logging.WARNING, logger="fx_ledger.resolver"):
        result = resolver.resolve_rates_batch([("XYZ", "ABC"), ("USD", "CAD")], ON)

    assert result[CurrencyPair("XYZ", "ABC")] == 1.0
    assert result[CurrencyPair("USD", "CAD")] == 1.37
    assert any("XYZ_ABC" in record.message for record in caplog.records)


def test_single_pair_path_still_fails_fast_for_same_pair() -> None:
    resolver = RateResolver(_store(), fallback_rates={})

    assert resolver.resolve_rates_batch([("XYZ", "ABC")], ON)[CurrencyPair("XYZ", "ABC")] == 1.0
    with pytest.raises(RateNotFound):
        resolver.resolve_rate("XYZ", "ABC", ON)


def test_batch_uses_static_fallback_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    resolver = RateResolver(_store([]))

    with caplog.at_level(logging.WARNING, logger="fx_ledger.resolver"):
        result = resolver.resolve_rates_batch([("CAD", "EUR")], ON)

    assert result[CurrencyPair("CAD", "EUR")] == 0.68
    assert any("static fallback" in record.message for record in caplog.records)


def test_batch_ignores_records_after_effective_date() -> None:
    resolver = RateResolver(_store(), fallback_rates={})

    result = resolver.resolve_rates_batch([("USD", "CAD")], date(2024, 8, 1))
    earlier = resolver.resolve_rates_batch([("USD", "CAD")], date(2024, 1, 15))

    assert result[CurrencyPair("USD", "CAD")] == 1.40
    assert earlier[CurrencyPair("USD", "CAD")] == 1.35


def test_duplicate_pairs_are_resolved_once() -> None:
    store = _store()
    resolver = RateResolver(store)

    result = resolver.resolve_rates_batch([("USD", "CAD"), ("USD", "CAD")], ON)

    assert list(result) == [CurrencyPair("USD", "CAD")]
    (rate_filter,), _ = store.query_rates.call_args
    assert len(rate_filter.pairs) == 2


@pytest.mark.parametrize(
    "pair",
    [("USD", "CAD"), ("CAD", "USD"), ("EUR", "USD"), ("USD", "EUR"), ("GBP", "JPY")],
)
def test_batch_and_single_resolution_agree(pair: tuple[str, str]) -> None:
    resolver = RateResolver(InMemoryBackend(ROWS), fallback_rates={})

    batch = resolver.resolve_rates_batch([pair], ON)

    assert batch[CurrencyPair(*pair)] == pytest.approx(resolver.resolve_rate(*pair, ON))


def test_batch_result_keys_expose_string_form() -> None:
    resolver = RateResolver(InMemoryBackend(ROWS))

    result = resolver.resolve_rates_batch([("USD", "CAD")], ON)

    assert {pair.key: rate for pair, rate in result.items()} == {"USD_CAD": 1.37}


def test_batch_store_failure_is_not_masked() -> None:
    store = mock.MagicMock()
    store.query_rates.side_effect = RateStoreError("timeout")

    with pytest.raises(RateStoreError):
        RateResolver(store).resolve_rates_batch([("USD", "CAD")], ON)


def test_batch_rejects_malformed_pairs() -> None:
    with pytest.raises(ValueError):
        RateResolver(_store()).resolve_rates_batch([("USD",)], ON)
