"""Domain models for derived financial aggregates."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class DistributionSlice:
    """One slice of a chart-ready distribution.

    Attributes:
        name: Wallet or category label.
        value: Amount in ``currency``.
        fill: Chart colour token.
        currency: Currency of ``value``.
        converted: False when no rate was available and ``value`` is still
            in the source currency.
    """

    name: str
    value: Decimal
    fill: str
    currency: str
    converted: bool = True


@dataclass(frozen=True)
class OverviewSummary:
    """Totals for the dashboard header."""

    total_balance: Decimal
    income: Decimal
    expenses: Decimal
    transaction_count: int
    currency_code: str

    @property
    def net(self) -> Decimal:
        """Return income minus expenses."""
        return self.income - self.expenses


@dataclass(frozen=True)
class PeriodSummaryPoint:
    """Income, expenses and running balance for one day or month bucket."""

    date: date
    income: Decimal
    expenses: Decimal
    balance: Decimal


@dataclass(frozen=True)
class BudgetProgress:
    """Planned versus actual figures for one budget entry."""

    entry_id: str
    description: str
    category: str
    currency: str
    planned: Decimal
    actual: Decimal
    deviation: Decimal

    @property
    def is_over(self) -> bool:
        return self.deviation > 0


@dataclass(frozen=True)
class CashflowForecastPoint:
    """Projected balance for one forecast month."""

    period_start: date
    projected_balance: Decimal
    income_transactions: Decimal
    expense_transactions: Decimal
    budget_income: Decimal
    budget_expense: Decimal
    net_change: Decimal
    currency_code: str


@dataclass(frozen=True)
class BalanceDiscrepancy:
    """Wallet whose balance no longer matches its applied transactions."""

    wallet_id: str
    expected: Decimal
    actual: Decimal


__all__ = [
    "DistributionSlice",
    "OverviewSummary",
    "PeriodSummaryPoint",
    "BudgetProgress",
    "CashflowForecastPoint",
    "BalanceDiscrepancy",
]
