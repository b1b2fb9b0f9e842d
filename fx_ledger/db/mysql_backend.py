"""MySQL backend strategy."""

from __future__ import annotations

from fx_ledger.db.relational_backend import RelationalBackend

INSERT_IGNORE_SQL = """
INSERT IGNORE INTO fx_rates(base, quote, rate_date, rate, source)
VALUES(:base, :quote, :rate_date, :rate, :source)
"""


class MySQLBackend(RelationalBackend):
    """Relational rate store on MySQL (``mysql://`` or ``mysql+pymysql://``)."""

    insert_sql = INSERT_IGNORE_SQL


__all__ = ["MySQLBackend"]
