"""Data models shared across the resolver and the rate stores."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(slots=True)
class RateRecord:
    """A single stored rate: 1 unit of ``base`` equals ``rate`` units of ``quote``."""

    base: str
    quote: str
    rate_date: date
    rate: float
    source: str = "MANUAL"

    @property
    def pair(self) -> "CurrencyPair":
        return CurrencyPair(self.base, self.quote)


@dataclass(frozen=True, slots=True)
class CurrencyPair:
    """Ordered ``(base, quote)`` pair usable as a dictionary key."""

    base: str
    quote: str

    @property
    def key(self) -> str:
        """Return the ``"{base}_{quote}"`` string form of the pair."""

        return f"{self.base}_{self.quote}"

    @property
    def is_identity(self) -> bool:
        return self.base == self.quote

    def inverse(self) -> "CurrencyPair":
        return CurrencyPair(self.quote, self.base)

    def __str__(self) -> str:
        return self.key

    @classmethod
    def coerce(cls, value: Any) -> "CurrencyPair":
        """Build a pair from a ``CurrencyPair``, a 2-tuple or a ``from``/``to`` mapping."""

        if isinstance(value, CurrencyPair):
            return value
        if isinstance(value, Mapping):
            if "from" in value and "to" in value:
                return cls(value["from"], value["to"])
            if "base" in value and "quote" in value:
                return cls(value["base"], value["quote"])
            raise ValueError("currency pair mapping needs 'from'/'to' or 'base'/'quote' keys")
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(value[0], value[1])
        raise ValueError(f"Cannot interpret {value!r} as a currency pair")

    @classmethod
    def from_key(cls, key: str) -> "CurrencyPair":
        """Parse the ``"{base}_{quote}"`` string form."""

        base, sep, quote = key.partition("_")
        if not sep or not base or not quote:
            raise ValueError(f"Invalid currency pair key: {key!r}")
        return cls(base, quote)


@dataclass(slots=True)
class RateFilter:
    """Criteria accepted by :meth:`BackendStrategy.query_rates`.

    ``pairs`` takes precedence over ``base``/``quote`` when it is non-empty.
    """

    date_on_or_before: date
    base: str | None = None
    quote: str | None = None
    pairs: tuple[CurrencyPair, ...] = field(default_factory=tuple)

    def matches(self, record: RateRecord) -> bool:
        if record.rate_date > self.date_on_or_before:
            return False
        if self.pairs:
            return record.pair in self.pairs
        if self.base is not None and record.base != self.base:
            return False
        if self.quote is not None and record.quote != self.quote:
            return False
        return True


__all__ = ["CurrencyPair", "RateFilter", "RateRecord"]
