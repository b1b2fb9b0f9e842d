"""CLI + helpers for populating (seeding) a rate store from a CSV file."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from fx_ledger.db import DEFAULT_SQLITE_DB_PATH
from fx_ledger.db.base_backend import BackendStrategy, PersistenceResult
from fx_ledger.db.sqlite_backend import SQLiteBackend
from fx_ledger.ingestion.rate_csv import RateCSVParser
from fx_ledger.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["seed_rates", "parse_args", "main"]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--csv", dest="csv_path", required=True, help="CSV file with rates")
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--db",
        dest="db_path",
        default=str(DEFAULT_SQLITE_DB_PATH),
        help="SQLite database path",
    )
    target.add_argument(
        "--db-url",
        dest="db_url",
        help="Database URL (postgresql://, mysql://, mongodb://, sqlite:///)",
    )
    parser.add_argument(
        "--source",
        dest="source",
        default="CSV",
        help="Source label for rows without a Source column",
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Parse and validate the file without writing",
    )
    return parser.parse_args(argv)


def seed_rates(
    csv_path: str | Path,
    *,
    backend: BackendStrategy | None = None,
    db_path: str | Path = DEFAULT_SQLITE_DB_PATH,
    source: str = "CSV",
    dry_run: bool = False,
) -> PersistenceResult:
    """Load every rate in ``csv_path`` into ``backend`` (SQLite at ``db_path`` by default)."""

    rows = RateCSVParser(default_source=source).parse(csv_path)
    LOGGER.info("Parsed %s rate rows from %s", len(rows), csv_path)
    if dry_run:
        LOGGER.info("Dry-run enabled; skipping insert of %s rows", len(rows))
        return PersistenceResult()

    owns_backend = backend is None
    target = backend if backend is not None else SQLiteBackend(db_path)
    try:
        target.ensure_schema()
        result = target.insert_rates(rows)
    finally:
        if owns_backend:
            target.close()
    LOGGER.info(
        "Seeding finished: inserted %s rows, skipped %s existing rows (total %s)",
        result.inserted,
        result.skipped,
        result.total,
    )
    return result


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    if args.db_url:
        from fx_ledger import FxLedger

        ledger = FxLedger(args.db_url)
        try:
            seed_rates(
                args.csv_path,
                backend=ledger.store,
                source=args.source,
                dry_run=args.dry_run,
            )
        finally:
            ledger.close()
        return
    seed_rates(args.csv_path, db_path=args.db_path, source=args.source, dry_run=args.dry_run)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
