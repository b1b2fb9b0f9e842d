"""SQLAlchemy ORM persistence for the local SQLite rate store."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Sequence, cast

from sqlalchemy import Column, Date, DateTime, Float, String, and_, create_engine, or_, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from fx_ledger.db import DEFAULT_SQLITE_DB_PATH
from fx_ledger.db.base_backend import PersistenceResult
from fx_ledger.errors import RateStoreError
from fx_ledger.ingestion.models import RateFilter, RateRecord
from fx_ledger.utils.logger import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class _FxRate(Base):
    __tablename__ = "fx_rates"

    base = Column(String(3), primary_key=True)
    quote = Column(String(3), primary_key=True)
    rate_date = Column(Date, primary_key=True)
    rate = Column(Float, nullable=False)
    source = Column(String, nullable=False, default="MANUAL")
    created_at = Column(DateTime, server_default=text("CURRENT_TIMESTAMP"))


def _to_record(model: _FxRate) -> RateRecord:
    return RateRecord(
        base=cast(str, model.base),
        quote=cast(str, model.quote),
        rate_date=cast(date, model.rate_date),
        rate=cast(float, model.rate),
        source=cast(str, model.source),
    )


class SQLiteManager:
    """Owns the SQLite engine and session factory for ``fx_rates``."""

    def __init__(self, db_path: str | Path = DEFAULT_SQLITE_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        self.engine: Engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
        )
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise RateStoreError(
                f"Failed to prepare SQLite store at {self.db_path}: {exc}"
            ) from exc
        self._SessionFactory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, future=True
        )

    def insert_rates(self, rows: Sequence[RateRecord]) -> PersistenceResult:
        result = PersistenceResult()
        try:
            with self._SessionFactory() as session:
                for row in rows:
                    pk = {"base": row.base, "quote": row.quote, "rate_date": row.rate_date}
                    if session.get(_FxRate, pk) is not None:
                        result.skipped += 1
                        continue
                    session.add(
                        _FxRate(
                            base=row.base,
                            quote=row.quote,
                            rate_date=row.rate_date,
                            rate=row.rate,
                            source=row.source,
                        )
                    )
                    # Flush so duplicates inside the same batch are seen by session.get.
                    session.flush()
                    result.inserted += 1
                session.commit()
        except SQLAlchemyError as exc:
            raise RateStoreError(f"Failed to insert SQLite rates: {exc}") from exc
        LOGGER.info(
            "Inserted %s rows, skipped %s existing rows (total %s)",
            result.inserted,
            result.skipped,
            result.total,
        )
        return result

    def query_rates(self, rate_filter: RateFilter) -> list[RateRecord]:
        stmt = select(_FxRate).where(_FxRate.rate_date <= rate_filter.date_on_or_before)
        if rate_filter.pairs:
            stmt = stmt.where(
                or_(
                    *(
                        and_(_FxRate.base == pair.base, _FxRate.quote == pair.quote)
                        for pair in rate_filter.pairs
                    )
                )
            )
        else:
            if rate_filter.base is not None:
                stmt = stmt.where(_FxRate.base == rate_filter.base)
            if rate_filter.quote is not None:
                stmt = stmt.where(_FxRate.quote == rate_filter.quote)
        stmt = stmt.order_by(_FxRate.rate_date.desc())
        return self._execute(stmt)

    def fetch_all(self) -> list[RateRecord]:
        return self.fetch_range()

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[RateRecord]:
        stmt = select(_FxRate).order_by(_FxRate.rate_date)
        if start is not None:
            stmt = stmt.where(_FxRate.rate_date >= start)
        if end is not None:
            stmt = stmt.where(_FxRate.rate_date <= end)
        return self._execute(stmt)

    def _execute(self, stmt) -> list[RateRecord]:
        try:
            with self._SessionFactory() as session:
                return [_to_record(model) for model in session.execute(stmt).scalars()]
        except SQLAlchemyError as exc:
            raise RateStoreError(f"SQLite rate query failed: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - trivial
        self.engine.dispose()

    def __enter__(self) -> "SQLiteManager":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["SQLiteManager"]
