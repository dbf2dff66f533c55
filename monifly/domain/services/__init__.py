"""Domain services package."""

from .budgeting import BudgetProjector
from .crypto import CryptoPortfolio
from .debts import DebtTracker, derive_debt_status
from .fx import (
    ConversionResult,
    CurrencyConverter,
    RateTable,
    default_rate_table,
    quantize_money,
)
from .ledger import WalletLedger
from .normalization import normalize_category, normalize_currency_code
from .periods import PeriodResolver, parse_filter_period

__all__ = [
    "BudgetProjector",
    "CryptoPortfolio",
    "DebtTracker",
    "derive_debt_status",
    "ConversionResult",
    "CurrencyConverter",
    "RateTable",
    "default_rate_table",
    "quantize_money",
    "WalletLedger",
    "normalize_category",
    "normalize_currency_code",
    "PeriodResolver",
    "parse_filter_period",
]
