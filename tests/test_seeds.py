from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

import fx_ledger.seeds as seeds_pkg
from fx_ledger.db.memory_backend import InMemoryBackend
from fx_ledger.db.sqlite_backend import SQLiteBackend
from fx_ledger.ingestion.models import RateFilter
from fx_ledger.seeds import populate_rates

CSV_CONTENT = """Date,Base,Quote,Rate,Source
2024-01-01,USD,CAD,1.35,
2024-01-01,EUR,USD,1.08,ECB
2024-02-01,USD,CAD,1.36,
"""


@pytest.fixture
def rates_csv(tmp_path: Path) -> Path:
    path = tmp_path / "rates.csv"
    path.write_text(CSV_CONTENT, encoding="utf-8")
    return path


def test_seed_rates_into_sqlite_is_append_only(rates_csv: Path, tmp_path: Path) -> None:
    db_path = tmp_path / "rates.db"

    first = populate_rates.seed_rates(rates_csv, db_path=db_path, source="TREASURY")
    second = populate_rates.seed_rates(rates_csv, db_path=db_path)

    assert (first.inserted, first.skipped) == (3, 0)
    assert (second.inserted, second.skipped) == (0, 3)
    backend = SQLiteBackend(db_path)
    try:
        rows = backend.fetch_range()
    finally:
        backend.close()
    assert {(row.base, row.quote, row.source) for row in rows} == {
        ("USD", "CAD", "TREASURY"),
        ("EUR", "USD", "ECB"),
    }


def test_seed_rates_dry_run_does_not_write(rates_csv: Path) -> None:
    backend = InMemoryBackend()

    result = populate_rates.seed_rates(rates_csv, backend=backend, dry_run=True)

    assert result.total == 0
    assert len(backend) == 0


def test_seed_rates_does_not_close_caller_backend(rates_csv: Path, monkeypatch) -> None:
    backend = InMemoryBackend()
    closed = {"value": False}
    monkeypatch.setattr(backend, "close", lambda: closed.update(value=True))

    result = populate_rates.seed_rates(rates_csv, backend=backend)

    assert result.inserted == 3
    assert closed["value"] is False
    latest = backend.query_rates(RateFilter(date(2024, 3, 1), base="USD", quote="CAD"))
    assert latest[0].rate == 1.36


def test_main_seeds_sqlite_path(rates_csv: Path, tmp_path: Path) -> None:
    db_path = tmp_path / "cli.db"

    populate_rates.main(["--csv", str(rates_csv), "--db", str(db_path)])

    backend = SQLiteBackend(db_path)
    try:
        assert len(backend.fetch_range()) == 3
    finally:
        backend.close()


def test_main_with_db_url_uses_configured_store(rates_csv: Path, tmp_path: Path) -> None:
    db_path = tmp_path / "url.db"

    populate_rates.main(["--csv", str(rates_csv), "--db-url", f"sqlite:///{db_path}"])

    backend = SQLiteBackend(db_path)
    try:
        assert len(backend.fetch_range()) == 3
    finally:
        backend.close()


def test_parse_args_defaults(rates_csv: Path) -> None:
    args = populate_rates.parse_args(["--csv", str(rates_csv), "--dry-run"])

    assert args.csv_path == str(rates_csv)
    assert args.dry_run is True
    assert args.db_url is None
    assert args.source == "CSV"


def test_parse_args_rejects_both_targets(rates_csv: Path) -> None:
    with pytest.raises(SystemExit):
        populate_rates.parse_args(
            ["--csv", str(rates_csv), "--db", "x.db", "--db-url", "sqlite:///y.db"]
        )


def test_seeds_package_exposes_seed_rates_lazily() -> None:
    assert seeds_pkg.seed_rates is populate_rates.seed_rates
    with pytest.raises(AttributeError):
        getattr(seeds_pkg, "missing")
