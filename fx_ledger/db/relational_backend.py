"""Shared logic for SQL (Postgres/MySQL) rate stores."""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from fx_ledger.db.base_backend import BackendStrategy, PersistenceResult
from fx_ledger.errors import RateStoreError
from fx_ledger.ingestion.models import RateFilter, RateRecord
from fx_ledger.utils.date_range import normalise_stored_date
from fx_ledger.utils.logger import get_logger

LOGGER = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS fx_rates (
    base VARCHAR(3) NOT NULL,
    quote VARCHAR(3) NOT NULL,
    rate_date DATE NOT NULL,
    rate NUMERIC(18, 8) NOT NULL,
    source VARCHAR(32) NOT NULL DEFAULT 'MANUAL',
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY(base, quote, rate_date)
);
"""

EXISTS_SQL = (
    "SELECT 1 FROM fx_rates WHERE base = :base AND quote = :quote AND rate_date = :rate_date"
)
INSERT_SQL = """
INSERT INTO fx_rates(base, quote, rate_date, rate, source)
VALUES(:base, :quote, :rate_date, :rate, :source)
"""
SELECT_COLUMNS = "SELECT base, quote, rate_date, rate, source FROM fx_rates"


class RelationalBackend(BackendStrategy):
    """Base class that encapsulates SQLAlchemy powered interactions."""

    # Dialect-specific "insert unless present" statement; ``None`` falls back
    # to a portable existence check inside the same transaction.
    insert_sql: str | None = None

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine_instance: Engine | None = None

    def _get_engine(self) -> Engine:
        if self._engine_instance is None:
            self._engine_instance = create_engine(self.url, future=True)
        return self._engine_instance

    def ensure_schema(self) -> None:
        engine = self._get_engine()
        try:
            with engine.begin() as connection:
                LOGGER.info("Ensuring fx_rates schema exists")
                connection.execute(text("SELECT 1"))
                connection.execute(text(SCHEMA_SQL))
        except SQLAlchemyError as exc:
            raise RateStoreError(f"Failed to ensure fx_rates schema: {exc}") from exc

    def insert_rates(self, rows: Sequence[RateRecord]) -> PersistenceResult:
        result = PersistenceResult()
        if not rows:
            return result
        engine = self._get_engine()
        try:
            with engine.begin() as connection:
                for row in rows:
                    params = {
                        "base": row.base,
                        "quote": row.quote,
                        "rate_date": row.rate_date.isoformat(),
                        "rate": row.rate,
                        "source": row.source,
                    }
                    if self._insert_row(connection, params):
                        result.inserted += 1
                    else:
                        result.skipped += 1
        except SQLAlchemyError as exc:
            raise RateStoreError(f"Failed to insert relational rates: {exc}") from exc
        return result

    def _insert_row(self, connection: Connection, params: dict[str, Any]) -> bool:
        if self.insert_sql is not None:
            return connection.execute(text(self.insert_sql), params).rowcount > 0
        if connection.execute(text(EXISTS_SQL), params).first() is not None:
            return False
        connection.execute(text(INSERT_SQL), params)
        return True

    def query_rates(self, rate_filter: RateFilter) -> list[RateRecord]:
        where_clauses = ["rate_date <= :on_or_before"]
        params: dict[str, object] = {"on_or_before": rate_filter.date_on_or_before.isoformat()}
        if rate_filter.pairs:
            pair_clauses: list[str] = []
            for index, pair in enumerate(rate_filter.pairs):
                pair_clauses.append(f"(base = :base_{index} AND quote = :quote_{index})")
                params[f"base_{index}"] = pair.base
                params[f"quote_{index}"] = pair.quote
            where_clauses.append("(" + " OR ".join(pair_clauses) + ")")
        else:
            if rate_filter.base is not None:
                where_clauses.append("base = :base")
                params["base"] = rate_filter.base
            if rate_filter.quote is not None:
                where_clauses.append("quote = :quote")
                params["quote"] = rate_filter.quote
        query = (
            f"{SELECT_COLUMNS} WHERE "
            + " AND ".join(where_clauses)
            + " ORDER BY rate_date DESC"
        )
        return self._fetch(query, params)

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[RateRecord]:
        where_clauses: list[str] = []
        params: dict[str, object] = {}
        if start is not None:
            where_clauses.append("rate_date >= :start_date")
            params["start_date"] = start.isoformat()
        if end is not None:
            where_clauses.append("rate_date <= :end_date")
            params["end_date"] = end.isoformat()
        query = f"{SELECT_COLUMNS} ORDER BY rate_date"
        if where_clauses:
            query = f"{SELECT_COLUMNS} WHERE " + " AND ".join(where_clauses) + " ORDER BY rate_date"
        return self._fetch(query, params)

    def _fetch(self, query: str, params: dict[str, object]) -> list[RateRecord]:
        engine = self._get_engine()
        records: list[RateRecord] = []
        try:
            with engine.connect() as connection:
                for row in connection.execute(text(query), params):
                    mapping = row._mapping
                    records.append(
                        RateRecord(
                            base=mapping["base"],
                            quote=mapping["quote"],
                            rate_date=normalise_stored_date(mapping["rate_date"]),
                            rate=float(mapping["rate"]),
                            source=mapping["source"],
                        )
                    )
        except SQLAlchemyError as exc:
            raise RateStoreError(f"Relational rate query failed: {exc}") from exc
        return records

    def close(self) -> None:  # pragma: no cover - trivial resource cleanup
        if self._engine_instance is not None:
            self._engine_instance.dispose()


__all__ = ["RelationalBackend"]
