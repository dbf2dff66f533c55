"""Domain models for wallets and the transactions applied to them."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class TransactionType(str, Enum):
    """Direction of a transaction; the stored amount is never signed."""

    INCOME = "income"
    EXPENSE = "expense"

    def signed(self, amount: Decimal) -> Decimal:
        """Return ``amount`` with the sign implied by the type."""
        return amount if self is TransactionType.INCOME else -amount


class TransactionCategory(str, Enum):
    """Built-in categories. Anything else is stored as a custom category."""

    OTHER = "other"
    SALARY = "salary"
    BUSINESS = "business"
    INVESTMENT = "investment"
    RENT = "rent"
    UTILITIES = "utilities"
    GROCERIES = "groceries"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    SHOPPING = "shopping"
    TRAVEL = "travel"
    CRYPTO = "crypto"


@dataclass(frozen=True)
class Wallet:
    """A named money-holding account with its own currency.

    Attributes:
        id: Wallet identifier.
        name: Display name.
        currency: Currency code of the balance.
        balance: Current balance in ``currency``.
        opening_balance: Initial balance plus manual balance adjustments.
            ``balance - opening_balance`` is always the sum of the signed
            effects of the transactions currently applied to the wallet.
        is_default: Whether the wallet is preselected for new transactions.
        icon: Optional icon identifier for the UI.
        color: Optional colour for the UI.
    """

    id: str
    name: str
    currency: str
    balance: Decimal
    opening_balance: Decimal
    is_default: bool = False
    icon: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class Transaction:
    """A dated income or expense event against exactly one wallet.

    ``amount`` and ``currency`` are kept exactly as recorded. ``wallet_amount``
    is the magnitude of the effect on the wallet, in the wallet's currency at
    the time the transaction was applied; reversals always use it.
    """

    id: str
    date: date
    description: str
    amount: Decimal
    currency: str
    type: TransactionType
    category: str
    wallet_id: str
    wallet_amount: Decimal
    notes: str = ""

    @property
    def signed_effect(self) -> Decimal:
        """Return the signed balance delta in the wallet's currency."""
        return self.type.signed(self.wallet_amount)


__all__ = ["TransactionType", "TransactionCategory", "Wallet", "Transaction"]
