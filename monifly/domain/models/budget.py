"""Domain models for planned income and expenses."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from .wallets import TransactionType


class BudgetFrequency(str, Enum):
    MONTHLY = "monthly"
    ONCE = "once"


@dataclass(frozen=True)
class BudgetEntry:
    """A recurring or one-off planned income or expense.

    A monthly entry occurs once per calendar month on ``day_of_month``
    (clamped to the month's last day) from ``start_date`` onward. A one-off
    entry occurs exactly on ``start_date``.
    """

    id: str
    description: str
    amount: Decimal
    currency: str
    type: TransactionType
    category: str
    frequency: BudgetFrequency
    start_date: date
    day_of_month: int | None = None
    limit: Decimal | None = None
    is_active: bool = True
    wallet_id: str | None = None

    @property
    def baseline(self) -> Decimal:
        """Return the amount actual spending is compared against."""
        return self.limit if self.limit is not None else self.amount


__all__ = ["BudgetFrequency", "BudgetEntry"]
