"""Snapshot of every collection owned by the finance store."""

from dataclasses import dataclass, field
from datetime import date

from monifly.domain.constants import DEFAULT_DISPLAY_CURRENCY

from .budget import BudgetEntry
from .crypto import CryptoHolding
from .debts import Debt, DebtPayment
from .periods import FilterPeriod
from .wallets import Transaction, Wallet


@dataclass(frozen=True)
class Settings:
    """User-level settings read by aggregate queries at call time."""

    primary_display_currency: str = DEFAULT_DISPLAY_CURRENCY
    filter_period: FilterPeriod = FilterPeriod.CURRENT_MONTH
    custom_period_start: date | None = None
    custom_period_end: date | None = None
    custom_categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class FinancialState:
    """Immutable, consistent snapshot of the engine's collections."""

    wallets: tuple[Wallet, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    budget_entries: tuple[BudgetEntry, ...] = ()
    debts: tuple[Debt, ...] = ()
    payments: tuple[DebtPayment, ...] = ()
    crypto_holdings: tuple[CryptoHolding, ...] = ()
    settings: Settings = field(default_factory=Settings)


__all__ = ["Settings", "FinancialState"]
