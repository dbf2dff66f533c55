"""Domain models for crypto holdings bought and sold through fiat wallets."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from .wallets import TransactionType


@dataclass(frozen=True)
class CryptoHolding:
    """Units of one crypto asset held by the user.

    Attributes:
        id: Holding identifier.
        asset: Asset symbol such as ``BTC``; one holding per symbol.
        name: Display name of the asset.
        amount: Units currently held.
        purchase_price: Average price paid per unit, in ``purchase_currency``.
        purchase_currency: Fiat currency of ``purchase_price``.
        purchase_date: Date of the first purchase.
    """

    id: str
    asset: str
    name: str
    amount: Decimal
    purchase_price: Decimal
    purchase_currency: str
    purchase_date: date

    @property
    def cost_basis(self) -> Decimal:
        """Return what the held units cost, in ``purchase_currency``."""
        return self.amount * self.purchase_price


@dataclass(frozen=True)
class CryptoTrade:
    """Fiat side of a buy or a sell, applied to a wallet as one transaction."""

    holding_id: str
    asset: str
    units: Decimal
    total: Decimal
    currency: str
    type: TransactionType

    @property
    def description(self) -> str:
        verb = "Buy" if self.type is TransactionType.EXPENSE else "Sell"
        return f"{verb} {self.units.normalize():f} {self.asset}"


@dataclass(frozen=True)
class CryptoFlowSummary:
    """Crypto purchases and sales over a period, in one currency."""

    purchases: Decimal
    sales: Decimal
    currency: str

    @property
    def net(self) -> Decimal:
        """Return sales minus purchases."""
        return self.sales - self.purchases


__all__ = ["CryptoHolding", "CryptoTrade", "CryptoFlowSummary"]
