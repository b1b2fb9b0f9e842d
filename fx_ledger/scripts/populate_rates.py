"""CLI entry point for seeding rates from a CSV file."""

from __future__ import annotations

from fx_ledger.seeds.populate_rates import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    main()
