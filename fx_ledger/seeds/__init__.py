"""Database seeding utilities for :mod:`fx_ledger`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = ["seed_rates"]

if TYPE_CHECKING:  # pragma: no cover - import only for static analyzers
    from fx_ledger.seeds.populate_rates import seed_rates as seed_rates


def __getattr__(name: str) -> Any:
    """Lazily expose seed helpers so importing the package stays cheap."""

    if name == "seed_rates":
        from fx_ledger.seeds.populate_rates import seed_rates as _seed

        return _seed
    raise AttributeError(f"module 'fx_ledger.seeds' has no attribute {name}")
