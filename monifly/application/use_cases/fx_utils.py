"""Shared helpers for currency conversion in application use cases."""

from decimal import Decimal

from monifly.domain.models import Transaction, Wallet
from monifly.domain.services.fx import CurrencyConverter


def display_amount(
    converter: CurrencyConverter,
    amount: Decimal,
    currency: str,
    display_currency: str,
) -> Decimal | None:
    """Convert an amount for an aggregate view.

    Args:
        converter: Converter holding the current rate table.
        amount: Amount in ``currency``.
        currency: Source currency code.
        display_currency: Target currency code.

    Returns:
        Decimal | None: Converted amount, or None when no rate is known.
        The converter logs the missing rate.
    """
    result = converter.try_convert(amount, currency, display_currency)
    return result.amount if result.converted else None


def transaction_display_amount(
    converter: CurrencyConverter,
    transaction: Transaction,
    display_currency: str,
) -> Decimal | None:
    """Return a transaction's unsigned amount in the display currency."""
    return display_amount(
        converter,
        transaction.amount,
        transaction.currency,
        display_currency,
    )


def total_wallet_balance(
    converter: CurrencyConverter,
    wallets: tuple[Wallet, ...],
    display_currency: str,
) -> Decimal:
    """Sum wallet balances that can be converted to the display currency."""
    total = Decimal("0")
    for wallet in wallets:
        converted = display_amount(
            converter,
            wallet.balance,
            wallet.currency,
            display_currency,
        )
        if converted is not None:
            total += converted
    return total


__all__ = ["display_amount", "transaction_display_amount", "total_wallet_balance"]
