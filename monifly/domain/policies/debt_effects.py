"""Policies mapping debt movements to wallet transaction types."""

from monifly.domain.models import DebtType, TransactionType


def payment_transaction_type(debt_type: DebtType) -> TransactionType:
    """Return the wallet effect of a repayment.

    Paying back what I owe is an expense; being repaid is income.
    """
    if debt_type.is_receivable:
        return TransactionType.INCOME
    return TransactionType.EXPENSE


def disbursement_transaction_type(debt_type: DebtType) -> TransactionType:
    """Return the wallet effect of opening a debt: borrowing credits, lending debits."""
    if debt_type.is_receivable:
        return TransactionType.EXPENSE
    return TransactionType.INCOME


__all__ = ["payment_transaction_type", "disbursement_transaction_type"]
