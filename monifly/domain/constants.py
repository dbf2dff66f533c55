"""Domain constants for the finance engine."""

from decimal import Decimal

PIVOT_CURRENCY = "USD"
DEFAULT_DISPLAY_CURRENCY = "USD"

CRYPTO_CURRENCIES = frozenset({"BTC", "ETH", "SOL", "ADA"})

KNOWN_CURRENCIES = frozenset(
    {
        "USD",
        "EUR",
        "GBP",
        "JPY",
        "CAD",
        "AUD",
        "CHF",
        "CNY",
        "INR",
        "PLN",
        "TRY",
        "KZT",
        "BYN",
        "RUB",
        "UAH",
    }
) | CRYPTO_CURRENCIES

FIAT_DECIMAL_PLACES = 2
CRYPTO_DECIMAL_PLACES = 8

# Seed quotes expressed as "1 unit of X = rate USD".
DEFAULT_RATES_TO_USD = {
    "RUB": Decimal("1") / Decimal("90"),
    "UAH": Decimal("1") / Decimal("40.5"),
    "EUR": Decimal("1.08"),
    "GBP": Decimal("1.27"),
    "JPY": Decimal("1") / Decimal("150"),
    "CAD": Decimal("0.73"),
    "AUD": Decimal("0.66"),
    "CHF": Decimal("1.1"),
    "CNY": Decimal("0.14"),
    "INR": Decimal("0.012"),
    "PLN": Decimal("0.25"),
    "TRY": Decimal("0.031"),
    "KZT": Decimal("0.0022"),
    "BYN": Decimal("0.31"),
    "BTC": Decimal("68000"),
    "ETH": Decimal("3800"),
    "SOL": Decimal("150"),
    "ADA": Decimal("0.45"),
}

CHART_COLORS = (
    "hsl(var(--chart-1))",
    "hsl(var(--chart-2))",
    "hsl(var(--chart-3))",
    "hsl(var(--chart-4))",
    "hsl(var(--chart-5))",
)

DEBT_REMINDER_SOON_DAYS = 7
CASHFLOW_FORECAST_HORIZONS = (1, 3, 6)
CASHFLOW_HISTORY_MONTHS = 3
FINANCIAL_CONTEXT_DAYS = 30
FINANCIAL_CONTEXT_MAX_TRANSACTIONS = 20


__all__ = [
    "PIVOT_CURRENCY",
    "DEFAULT_DISPLAY_CURRENCY",
    "CRYPTO_CURRENCIES",
    "KNOWN_CURRENCIES",
    "FIAT_DECIMAL_PLACES",
    "CRYPTO_DECIMAL_PLACES",
    "DEFAULT_RATES_TO_USD",
    "CHART_COLORS",
    "DEBT_REMINDER_SOON_DAYS",
    "CASHFLOW_FORECAST_HORIZONS",
    "CASHFLOW_HISTORY_MONTHS",
    "FINANCIAL_CONTEXT_DAYS",
    "FINANCIAL_CONTEXT_MAX_TRANSACTIONS",
]
