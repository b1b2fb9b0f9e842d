from datetime import date

from fx_ledger import CurrencyPair, FxLedger, MoneyAmount, RateNotFound, RateRecord

print(FxLedger.__version__)  # 0.1.0

# Default Usage (local SQLite file, or FX_LEDGER_DB_URL when set)
fx = FxLedger()

# Append a few rates; existing (base, quote, date) rows are left untouched
fx.seed(
    [
        RateRecord(base="USD", quote="CAD", rate_date=date(2025, 1, 2), rate=1.4385),
        RateRecord(base="EUR", quote="USD", rate_date=date(2025, 1, 2), rate=1.0354),
    ]
)

# Or load them from a CSV file with a Date,Base,Quote,Rate header
# fx.seed("rates.csv")

# Single pair; CAD->USD comes from the inverse of the stored USD->CAD rate
print(fx.rate("USD", "CAD", date(2025, 1, 31)))  # 1.4385
print(fx.rate("CAD", "USD", date(2025, 1, 31)))  # 0.6951...

# Integer minor units in, integer minor units out
print(fx.convert(125_000, "USD", "CAD", date(2025, 1, 31)))

# Unknown pairs fail fast on the single-pair path
try:
    fx.rate("XYZ", "ABC", date(2025, 1, 31))
except RateNotFound as exc:
    print(exc)

# Batch lookups hit the store once and degrade missing pairs to 1.0
rates = fx.rates([("EUR", "CAD"), ("CAD", "USD"), ("XYZ", "CAD")], date(2025, 1, 31))
print({pair.key: rate for pair, rate in rates.items()})
print(rates[CurrencyPair("CAD", "USD")])

# Dashboard style totals across currencies
balances = [
    MoneyAmount(1_000_000, "CAD"),
    MoneyAmount(250_000, "USD"),
    MoneyAmount(80_000, "EUR"),
]
print(fx.total(balances, "CAD", date(2025, 1, 31)))

fx.close()
