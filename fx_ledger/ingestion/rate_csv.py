"""CSV helpers for exporting and re-reading rate records."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Sequence

from fx_ledger.ingestion.models import RateRecord
from fx_ledger.utils.date_range import parse_date

CSV_HEADER = ("Date", "Base", "Quote", "Rate")
OPTIONAL_COLUMNS = ("Source",)


class RateCSVExporter:
    """Write rate records into a ``Date,Base,Quote,Rate,Source`` CSV file."""

    def write(self, records: Sequence[RateRecord], csv_path: str | Path) -> Path:
        if not records:
            raise ValueError("records collection is empty")

        path = Path(csv_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        ordered = sorted(records, key=lambda row: (row.rate_date, row.base, row.quote))
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(CSV_HEADER + OPTIONAL_COLUMNS)
            for record in ordered:
                writer.writerow(
                    [
                        record.rate_date.isoformat(),
                        record.base,
                        record.quote,
                        f"{record.rate}",
                        record.source,
                    ]
                )
        return path


class RateCSVParser:
    """Parse CSV files with one rate per row (see :data:`CSV_HEADER`).

    Blank rows are skipped; a malformed row raises ``ValueError`` naming the
    line so a bad file never half-loads silently.
    """

    def __init__(self, *, default_source: str = "CSV") -> None:
        self.default_source = default_source

    def parse(self, csv_path: str | Path) -> list[RateRecord]:
        path = Path(csv_path)
        if not path.exists():
            raise FileNotFoundError(path)

        with path.open("r", newline="", encoding="utf-8") as handle:
            reader = csv.DictReader(handle)
            reader.fieldnames = self._validate_header(reader.fieldnames)
            rows: list[RateRecord] = []
            for row in reader:
                if not any(str(value or "").strip() for value in row.values()):
                    continue
                rows.append(self._parse_row(row, reader.line_num))
        return rows

    def _parse_row(self, row: dict[str, str | None], line_no: int) -> RateRecord:
        try:
            rate_date = parse_date(row.get("Date") or "")
            rate = float(row.get("Rate") or "")
        except ValueError as exc:
            raise ValueError(f"Invalid rate row on line {line_no}: {exc}") from exc
        base = (row.get("Base") or "").strip().upper()
        quote = (row.get("Quote") or "").strip().upper()
        if not base or not quote:
            raise ValueError(f"Missing currency code on line {line_no}")
        if rate <= 0:
            raise ValueError(f"Rate must be positive on line {line_no}")
        source = (row.get("Source") or "").strip() or self.default_source
        return RateRecord(base=base, quote=quote, rate_date=rate_date, rate=rate, source=source)

    @staticmethod
    def _validate_header(fieldnames: Iterable[str] | None) -> list[str]:
        if not fieldnames:
            raise ValueError("CSV file does not contain a header row")
        normalized = [field.strip() for field in fieldnames]
        if normalized[: len(CSV_HEADER)] != list(CSV_HEADER):
            raise ValueError("Unexpected CSV header format")
        return normalized


__all__ = ["CSV_HEADER", "RateCSVExporter", "RateCSVParser"]
