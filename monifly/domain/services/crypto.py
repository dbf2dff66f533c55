"""Crypto holdings bought and sold against fiat wallets."""

from collections.abc import Callable, Iterable
from dataclasses import replace
from decimal import Decimal
from logging import Logger

from monifly.domain.constants import (
    CRYPTO_CURRENCIES,
    CRYPTO_DECIMAL_PLACES,
    KNOWN_CURRENCIES,
)
from monifly.domain.errors import CryptoHoldingNotFound, ValidationError
from monifly.domain.models import (
    CryptoFlowSummary,
    CryptoHolding,
    CryptoTrade,
    PeriodRange,
    Transaction,
    TransactionCategory,
    TransactionType,
    Wallet,
)
from monifly.domain.services.fx import CurrencyConverter, quantize_money
from monifly.domain.services.validation import (
    parse_iso_date,
    require_amount,
    require_currency,
)
from monifly.infrastructure.logging.logger import get_app_logger
from monifly.utils.decimal_utils import quantize
from monifly.utils.ids import generate_id


class CryptoPortfolio:
    """Maintain crypto holdings and price them with the rate table."""

    def __init__(
        self,
        converter: CurrencyConverter,
        logger: Logger | None = None,
        known_currencies: Iterable[str] = KNOWN_CURRENCIES,
        crypto_assets: Iterable[str] = CRYPTO_CURRENCIES,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        """Initialize the portfolio service.

        Args:
            converter: Converter used for funds checks and valuations.
            logger: Optional logger compatible with logging.Logger-like API.
            known_currencies: Fiat codes accepted in addition to the rate
                table's.
            crypto_assets: Asset symbols that can be bought.
            id_factory: Callable producing ids from a prefix.
        """
        self._converter = converter
        self._logger = logger or get_app_logger()
        self._known_currencies = frozenset(known_currencies)
        self._crypto_assets = frozenset(crypto_assets)
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def buy(
        self,
        holdings: tuple[CryptoHolding, ...],
        wallet: Wallet,
        *,
        asset: str,
        amount,
        price_per_unit,
        fiat_currency: str,
        purchase_date,
        name: str | None = None,
    ) -> tuple[tuple[CryptoHolding, ...], CryptoHolding, CryptoTrade]:
        """Add units to the asset's holding, paid from ``wallet``.

        A second purchase of the same asset updates the average purchase
        price in the holding's original purchase currency.

        Returns:
            tuple: Updated holdings, the affected holding and the fiat trade.

        Raises:
            ValidationError: If the wallet cannot cover the purchase.
            RateUnavailable: If the cost cannot be priced in the wallet's
                currency.
        """
        symbol = require_currency(asset, self._crypto_assets)
        units = self._units(amount)
        price = require_amount(price_per_unit, "price_per_unit", allow_zero=False)
        fiat = require_currency(fiat_currency, self._recognized_currencies())
        total = quantize_money(units * price, fiat)

        needed = self._converter.convert(total, fiat, wallet.currency)
        if wallet.balance < needed:
            raise ValidationError(
                f"Insufficient funds in wallet {wallet.name} to buy "
                f"{units.normalize():f} {symbol}"
            )

        existing = self.find_holding(holdings, symbol)
        if existing is None:
            holding = CryptoHolding(
                id=self._id_factory("crypto"),
                asset=symbol,
                name=(name or "").strip() or symbol,
                amount=units,
                purchase_price=price,
                purchase_currency=fiat,
                purchase_date=parse_iso_date(purchase_date, "purchase_date"),
            )
            updated = holdings + (holding,)
        else:
            added_cost = self._converter.convert(
                units * price,
                fiat,
                existing.purchase_currency,
            )
            total_units = existing.amount + units
            holding = replace(
                existing,
                amount=total_units,
                purchase_price=quantize(
                    (existing.cost_basis + added_cost) / total_units,
                    CRYPTO_DECIMAL_PLACES,
                ),
            )
            updated = self._replace(holdings, holding)

        trade = CryptoTrade(
            holding_id=holding.id,
            asset=symbol,
            units=units,
            total=total,
            currency=fiat,
            type=TransactionType.EXPENSE,
        )
        return updated, holding, trade

    def sell(
        self,
        holdings: tuple[CryptoHolding, ...],
        holding_id: str,
        *,
        amount,
        price_per_unit,
        fiat_currency: str,
    ) -> tuple[tuple[CryptoHolding, ...], CryptoTrade]:
        """Remove units from a holding; an emptied holding is dropped.

        Returns:
            tuple: Updated holdings and the fiat trade.

        Raises:
            ValidationError: If the holding has fewer units than requested.
        """
        holding = self.require_holding(holdings, holding_id)
        units = self._units(amount)
        price = require_amount(price_per_unit, "price_per_unit", allow_zero=False)
        fiat = require_currency(fiat_currency, self._recognized_currencies())
        if units > holding.amount:
            raise ValidationError(
                f"Cannot sell {units.normalize():f} {holding.asset}: only "
                f"{holding.amount.normalize():f} held"
            )

        remaining = holding.amount - units
        if remaining == 0:
            updated = tuple(item for item in holdings if item.id != holding_id)
        else:
            updated = self._replace(holdings, replace(holding, amount=remaining))

        trade = CryptoTrade(
            holding_id=holding.id,
            asset=holding.asset,
            units=units,
            total=quantize_money(units * price, fiat),
            currency=fiat,
            type=TransactionType.INCOME,
        )
        return updated, trade

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @staticmethod
    def find_holding(
        holdings: Iterable[CryptoHolding],
        asset: str,
    ) -> CryptoHolding | None:
        for holding in holdings:
            if holding.asset == asset:
                return holding
        return None

    @staticmethod
    def require_holding(
        holdings: Iterable[CryptoHolding],
        holding_id: str,
    ) -> CryptoHolding:
        for holding in holdings:
            if holding.id == holding_id:
                return holding
        raise CryptoHoldingNotFound(holding_id)

    def total_value(
        self,
        holdings: Iterable[CryptoHolding],
        display_currency: str,
    ) -> Decimal:
        """Value every holding at the current rate table.

        Holdings without a rate are skipped; the converter logs them.
        """
        total = Decimal("0")
        for holding in holdings:
            result = self._converter.try_convert(
                holding.amount,
                holding.asset,
                display_currency,
            )
            if result.converted:
                total += result.amount
        return quantize_money(total, display_currency)

    def period_flows(
        self,
        transactions: Iterable[Transaction],
        period: PeriodRange,
        display_currency: str,
    ) -> CryptoFlowSummary:
        """Sum crypto purchases (expenses) and sales (income) in ``period``."""
        purchases = Decimal("0")
        sales = Decimal("0")
        for transaction in transactions:
            if transaction.category != TransactionCategory.CRYPTO.value:
                continue
            if not period.contains(transaction.date):
                continue
            result = self._converter.try_convert(
                transaction.amount,
                transaction.currency,
                display_currency,
            )
            if not result.converted:
                continue
            if transaction.type is TransactionType.EXPENSE:
                purchases += result.amount
            else:
                sales += result.amount
        return CryptoFlowSummary(
            purchases=quantize_money(purchases, display_currency),
            sales=quantize_money(sales, display_currency),
            currency=display_currency,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _recognized_currencies(self) -> frozenset[str]:
        return self._known_currencies | self._converter.currencies()

    @staticmethod
    def _units(amount) -> Decimal:
        units = quantize(
            require_amount(amount, "amount", allow_zero=False),
            CRYPTO_DECIMAL_PLACES,
        )
        if units == 0:
            raise ValidationError("amount must be greater than zero")
        return units

    @staticmethod
    def _replace(
        holdings: tuple[CryptoHolding, ...],
        updated: CryptoHolding,
    ) -> tuple[CryptoHolding, ...]:
        return tuple(updated if item.id == updated.id else item for item in holdings)


__all__ = ["CryptoPortfolio"]
