"""MongoDB backend strategy."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Sequence

from fx_ledger.db.base_backend import BackendStrategy, PersistenceResult
from fx_ledger.errors import RateStoreError
from fx_ledger.ingestion.models import RateFilter, RateRecord
from fx_ledger.utils.logger import get_logger

try:  # pragma: no cover - optional dependency
    from pymongo import MongoClient, UpdateOne
    from pymongo.collection import Collection
    from pymongo.errors import PyMongoError
except ModuleNotFoundError:  # pragma: no cover - handled dynamically
    MongoClient = None  # type: ignore[assignment]
    UpdateOne = None  # type: ignore[assignment]
    Collection = None  # type: ignore[assignment]
    PyMongoError = Exception  # type: ignore[assignment]

LOGGER = get_logger(__name__)

COLLECTION_NAME = "fx_rates"


class MongoBackend(BackendStrategy):
    """Backend strategy that persists rate records inside MongoDB.

    Dates are stored as ISO strings so range filters compare lexicographically.
    """

    def __init__(self, url: str, *, database: str | None = None) -> None:
        if MongoClient is None:  # pragma: no cover - optional dependency
            raise ModuleNotFoundError("pymongo is required for MongoDB backends")
        self.url = url
        self._client = MongoClient(url)
        db = self._client.get_default_database() if database is None else self._client[database]
        if db is None:
            raise ValueError("MongoDB connection URI must include a database name")
        self._collection: Collection = db[COLLECTION_NAME]

    def ensure_schema(self) -> None:
        try:
            LOGGER.info("Ensuring MongoDB fx_rates collection exists")
            self._client.admin.command("ping")
            self._collection.create_index(
                [("base", 1), ("quote", 1), ("rate_date", 1)], unique=True
            )
        except PyMongoError as exc:
            raise RateStoreError(f"Failed to ensure MongoDB schema: {exc}") from exc

    def insert_rates(self, rows: Sequence[RateRecord]) -> PersistenceResult:
        result = PersistenceResult()
        if not rows:
            return result
        ops: list[UpdateOne] = []
        for row in rows:
            key = {
                "base": row.base,
                "quote": row.quote,
                "rate_date": row.rate_date.isoformat(),
            }
            doc = {
                **key,
                "rate": row.rate,
                "source": row.source,
                "created_at": datetime.now(timezone.utc),
            }
            # $setOnInsert keeps stored records immutable.
            ops.append(UpdateOne(key, {"$setOnInsert": doc}, upsert=True))
        try:
            outcome = self._collection.bulk_write(ops, ordered=False)
        except PyMongoError as exc:
            raise RateStoreError(f"Failed to insert MongoDB rates: {exc}") from exc
        result.inserted = int(outcome.upserted_count)
        result.skipped = len(rows) - result.inserted
        return result

    def query_rates(self, rate_filter: RateFilter) -> list[RateRecord]:
        query: dict[str, Any] = {"rate_date": {"$lte": rate_filter.date_on_or_before.isoformat()}}
        if rate_filter.pairs:
            query["$or"] = [{"base": pair.base, "quote": pair.quote} for pair in rate_filter.pairs]
        else:
            if rate_filter.base is not None:
                query["base"] = rate_filter.base
            if rate_filter.quote is not None:
                query["quote"] = rate_filter.quote
        return self._find(query, direction=-1)

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[RateRecord]:
        query: dict[str, Any] = {}
        if start is not None or end is not None:
            range_query: dict[str, str] = {}
            if start is not None:
                range_query["$gte"] = start.isoformat()
            if end is not None:
                range_query["$lte"] = end.isoformat()
            query["rate_date"] = range_query
        return self._find(query, direction=1)

    def _find(self, query: dict[str, Any], *, direction: int) -> list[RateRecord]:
        try:
            docs = self._collection.find(query).sort("rate_date", direction)
            return [
                RateRecord(
                    base=doc["base"],
                    quote=doc["quote"],
                    rate_date=date.fromisoformat(doc["rate_date"]),
                    rate=float(doc["rate"]),
                    source=doc.get("source", "MANUAL"),
                )
                for doc in docs
            ]
        except PyMongoError as exc:
            raise RateStoreError(f"MongoDB rate query failed: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - trivial cleanup
        self._client.close()


__all__ = ["MongoBackend"]
