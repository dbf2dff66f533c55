"""Domain models package."""

from .budget import BudgetEntry, BudgetFrequency
from .crypto import CryptoFlowSummary, CryptoHolding, CryptoTrade
from .debts import (
    Debt,
    DebtPayment,
    DebtReminder,
    DebtStatus,
    DebtType,
    ReminderState,
)
from .finance import (
    BalanceDiscrepancy,
    BudgetProgress,
    CashflowForecastPoint,
    DistributionSlice,
    OverviewSummary,
    PeriodSummaryPoint,
)
from .periods import PERIOD_ALIASES, FilterPeriod, PeriodRange
from .state import FinancialState, Settings
from .wallets import Transaction, TransactionCategory, TransactionType, Wallet

__all__ = [
    "BudgetEntry",
    "BudgetFrequency",
    "CryptoFlowSummary",
    "CryptoHolding",
    "CryptoTrade",
    "Debt",
    "DebtPayment",
    "DebtReminder",
    "DebtStatus",
    "DebtType",
    "ReminderState",
    "BalanceDiscrepancy",
    "BudgetProgress",
    "CashflowForecastPoint",
    "DistributionSlice",
    "OverviewSummary",
    "PeriodSummaryPoint",
    "PERIOD_ALIASES",
    "FilterPeriod",
    "PeriodRange",
    "FinancialState",
    "Settings",
    "Transaction",
    "TransactionCategory",
    "TransactionType",
    "Wallet",
]
