"""Domain package for finance rules and core models."""

from .constants import DEFAULT_DISPLAY_CURRENCY, KNOWN_CURRENCIES
from .errors import (
    DebtCancelled,
    InvariantViolation,
    MoniflyError,
    NotFound,
    RateUnavailable,
    ValidationError,
)
from .models import (
    BudgetEntry,
    Debt,
    DebtPayment,
    FilterPeriod,
    FinancialState,
    PeriodRange,
    Settings,
    Transaction,
    Wallet,
)
from .services import (
    BudgetProjector,
    CurrencyConverter,
    DebtTracker,
    PeriodResolver,
    RateTable,
    WalletLedger,
)

__all__ = [
    "DEFAULT_DISPLAY_CURRENCY",
    "KNOWN_CURRENCIES",
    "DebtCancelled",
    "InvariantViolation",
    "MoniflyError",
    "NotFound",
    "RateUnavailable",
    "ValidationError",
    "BudgetEntry",
    "Debt",
    "DebtPayment",
    "FilterPeriod",
    "FinancialState",
    "PeriodRange",
    "Settings",
    "Transaction",
    "Wallet",
    "BudgetProjector",
    "CurrencyConverter",
    "DebtTracker",
    "PeriodResolver",
    "RateTable",
    "WalletLedger",
]
