"""Rate store interface shared by every backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from fx_ledger.ingestion.models import RateFilter, RateRecord


@dataclass(slots=True)
class PersistenceResult:
    """How many rows a batch inserted and how many already existed."""

    inserted: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        """Return the number of rows seen in the batch."""

        return self.inserted + self.skipped


class BackendStrategy(ABC):
    """Common interface implemented by every rate store.

    Stores are append-only: ``insert_rates`` never overwrites an existing
    ``(base, quote, rate_date)`` record.
    """

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create required tables/collections and verify connectivity."""

    @abstractmethod
    def insert_rates(self, rows: Sequence[RateRecord]) -> PersistenceResult:
        """Insert rate records in bulk, skipping ones already stored."""

    @abstractmethod
    def query_rates(self, rate_filter: RateFilter) -> list[RateRecord]:
        """Return records matching ``rate_filter`` ordered by date, newest first."""

    @abstractmethod
    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[RateRecord]:
        """Return every record between ``start`` and ``end`` ordered by date."""

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Backends may override to release connections/resources."""


__all__ = ["BackendStrategy", "PersistenceResult"]
