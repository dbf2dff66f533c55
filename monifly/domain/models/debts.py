"""Domain models for debts and their payment history."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class DebtType(str, Enum):
    I_OWE = "iOwe"
    OWED_TO_ME = "owedToMe"
    PERSONAL = "personal"
    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    MORTGAGE = "mortgage"
    OTHER = "other"

    @property
    def is_receivable(self) -> bool:
        """Return True when the money is owed to the user."""
        return self is DebtType.OWED_TO_ME


class DebtStatus(str, Enum):
    PENDING = "pending"
    PARTIALLY_PAID = "partiallyPaid"
    PAID = "paid"
    CANCELLED = "cancelled"


class ReminderState(str, Enum):
    OVERDUE = "overdue"
    DUE_TODAY = "dueToday"
    DUE_SOON = "dueSoon"
    UPCOMING = "upcoming"
    SETTLED = "settled"
    NO_DUE_DATE = "noDueDate"


@dataclass(frozen=True)
class Debt:
    """A tracked obligation owed by or to the user.

    Attributes:
        amount: Original amount in ``currency``.
        paid_amount: Payments applied so far, never above ``amount``.
        overpaid_amount: Surplus accepted through explicit overpayments.
        status: Derived from ``paid_amount`` unless cancelled.
    """

    id: str
    title: str
    amount: Decimal
    currency: str
    type: DebtType
    start_date: date
    due_date: date | None = None
    status: DebtStatus = DebtStatus.PENDING
    paid_amount: Decimal = Decimal("0")
    overpaid_amount: Decimal = Decimal("0")
    interest_rate: Decimal = Decimal("0")
    person_name: str | None = None
    description: str | None = None
    initial_wallet_id: str | None = None

    @property
    def remaining_amount(self) -> Decimal:
        return self.amount - self.paid_amount


@dataclass(frozen=True)
class DebtPayment:
    """Append-only payment log entry.

    ``debt_amount`` is the payment converted into the debt's currency, the
    value added to the debt's running total.
    """

    id: str
    debt_id: str
    amount: Decimal
    currency: str
    date: date
    debt_amount: Decimal
    wallet_id: str | None = None
    transaction_id: str | None = None
    note: str = ""


@dataclass(frozen=True)
class DebtReminder:
    """Read-side due-date derivation for notification collaborators."""

    debt_id: str
    title: str
    due_date: date | None
    days_until_due: int | None
    state: ReminderState


__all__ = [
    "DebtType",
    "DebtStatus",
    "ReminderState",
    "Debt",
    "DebtPayment",
    "DebtReminder",
]
