"""Date helpers used to normalise effective dates and CSV values."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Tuple


@dataclass(frozen=True)
class DateRange:
    """Container representing a closed date range."""

    start: date | None
    end: date | None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("start date must not be after end date")

    def as_tuple(self) -> Tuple[date | None, date | None]:
        """Return the range as a tuple of ``(start, end)``."""
        return (self.start, self.end)

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


def parse_date(value: str | date) -> date:
    """Parse a date string in ISO format to :class:`date`."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def to_effective_date(value: str | date | None = None) -> date:
    """Normalise an effective date to a calendar day.

    ``datetime`` values lose their time of day so that every lookup on the
    same calendar day selects the same records; ``None`` means today.
    """

    if value is None:
        return date.today()
    try:
        return parse_date(value)
    except ValueError as exc:
        raise ValueError(f"Invalid effective date {value!r}; expected YYYY-MM-DD") from exc


def normalise_stored_date(value: object) -> date:
    """Coerce a date column value coming back from a driver."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


__all__ = ["DateRange", "normalise_stored_date", "parse_date", "to_effective_date"]
