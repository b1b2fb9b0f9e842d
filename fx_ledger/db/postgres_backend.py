"""PostgreSQL backend strategy."""

from __future__ import annotations

from fx_ledger.db.relational_backend import RelationalBackend

INSERT_ON_CONFLICT_SQL = """
INSERT INTO fx_rates(base, quote, rate_date, rate, source)
VALUES(:base, :quote, :rate_date, :rate, :source)
ON CONFLICT (base, quote, rate_date) DO NOTHING
"""


class PostgresBackend(RelationalBackend):
    """Relational rate store on PostgreSQL."""

    insert_sql = INSERT_ON_CONFLICT_SQL


__all__ = ["PostgresBackend"]
