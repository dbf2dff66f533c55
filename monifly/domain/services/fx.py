"""Currency conversion against an injected rate table.

Every cross-currency amount in the engine goes through
``CurrencyConverter.convert``. Rates are an external, refreshable resource:
this module only applies them.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from logging import Logger

from monifly.domain.constants import (
    CRYPTO_CURRENCIES,
    CRYPTO_DECIMAL_PLACES,
    DEFAULT_RATES_TO_USD,
    FIAT_DECIMAL_PLACES,
    PIVOT_CURRENCY,
)
from monifly.domain.errors import RateUnavailable, ValidationError
from monifly.domain.services.normalization import normalize_currency_code
from monifly.infrastructure.logging.logger import get_app_logger
from monifly.utils.decimal_utils import coerce_decimal, quantize


@dataclass(frozen=True)
class RateTable:
    """Exchange rates keyed by ``(from, to)`` currency pairs.

    A rate ``r`` for ``(A, B)`` means one unit of ``A`` is worth ``r`` units
    of ``B``.
    """

    rates: Mapping[tuple[str, str], Decimal] = field(default_factory=dict)
    pivot: str = PIVOT_CURRENCY

    @classmethod
    def from_pivot(
        cls,
        rates_to_pivot: Mapping[str, object],
        pivot: str = PIVOT_CURRENCY,
    ) -> "RateTable":
        """Build a table from quotes of each currency in the pivot currency.

        Args:
            rates_to_pivot: Mapping of currency code to its value in ``pivot``.
            pivot: Pivot currency code.

        Returns:
            RateTable: Table with one direct pair per quoted currency.
        """
        pivot_code = normalize_currency_code(pivot)
        if pivot_code is None:
            raise ValidationError("pivot currency must not be empty")
        rates: dict[tuple[str, str], Decimal] = {}
        for raw_code, raw_rate in rates_to_pivot.items():
            code = normalize_currency_code(raw_code)
            if code is None or code == pivot_code:
                continue
            rate = coerce_decimal(raw_rate)
            if rate <= 0:
                raise ValidationError(f"Rate for {code} must be positive")
            rates[(code, pivot_code)] = rate
        return cls(rates=rates, pivot=pivot_code)

    def currencies(self) -> frozenset[str]:
        """Return every currency code the table can price."""
        codes = {self.pivot}
        for source, target in self.rates:
            codes.add(source)
            codes.add(target)
        return frozenset(codes)

    def lookup(self, source: str, target: str) -> Decimal | None:
        """Return the rate from ``source`` to ``target`` or None.

        Tries the direct pair, the inverse pair, then a cross rate through
        the pivot currency.
        """
        if source == target:
            return Decimal("1")
        direct = self._pair(source, target)
        if direct is not None:
            return direct
        if source == self.pivot or target == self.pivot:
            return None
        to_pivot = self._pair(source, self.pivot)
        from_pivot = self._pair(self.pivot, target)
        if to_pivot is None or from_pivot is None:
            return None
        return to_pivot * from_pivot

    def _pair(self, source: str, target: str) -> Decimal | None:
        rate = self.rates.get((source, target))
        if rate is not None:
            return rate
        inverse = self.rates.get((target, source))
        if inverse:
            return Decimal("1") / inverse
        return None


def default_rate_table() -> RateTable:
    """Return the bundled seed table used until real rates are injected."""
    return RateTable.from_pivot(DEFAULT_RATES_TO_USD)


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a lenient conversion for display purposes."""

    amount: Decimal
    currency: str
    converted: bool


def money_places(currency: str) -> int:
    """Return the number of decimal places used to store an amount."""
    if normalize_currency_code(currency) in CRYPTO_CURRENCIES:
        return CRYPTO_DECIMAL_PLACES
    return FIAT_DECIMAL_PLACES


def quantize_money(amount: Decimal, currency: str) -> Decimal:
    """Round an amount to the precision of its currency."""
    return quantize(amount, money_places(currency))


class CurrencyConverter:
    """Apply a rate table to money amounts."""

    def __init__(
        self,
        rate_table: RateTable | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize the converter.

        Args:
            rate_table: Injected rates; defaults to the bundled seed table.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._rate_table = rate_table or default_rate_table()
        self._logger = logger or get_app_logger()

    @property
    def rate_table(self) -> RateTable:
        return self._rate_table

    def update_rates(self, rate_table: RateTable) -> None:
        """Swap in a refreshed rate table."""
        self._rate_table = rate_table
        self._logger.info(
            f"Rate table refreshed with {len(rate_table.rates)} pairs"
        )

    def currencies(self) -> frozenset[str]:
        return self._rate_table.currencies()

    def convert(
        self,
        amount: Decimal,
        from_currency: str,
        to_currency: str,
    ) -> Decimal:
        """Convert ``amount`` between currencies.

        Args:
            amount: Amount in ``from_currency``.
            from_currency: Source currency code.
            to_currency: Target currency code.

        Returns:
            Decimal: The same object when both codes are equal, otherwise the
            amount multiplied by the pair's rate.

        Raises:
            RateUnavailable: If the table cannot price the pair.
        """
        source = normalize_currency_code(from_currency)
        target = normalize_currency_code(to_currency)
        if source is None or target is None:
            raise ValidationError("currency must not be empty")
        if source == target:
            return amount
        rate = self._rate_table.lookup(source, target)
        if rate is None:
            raise RateUnavailable(source, target)
        return amount * rate

    def try_convert(
        self,
        amount: Decimal,
        from_currency: str,
        to_currency: str,
    ) -> ConversionResult:
        """Convert for display, falling back to the original amount.

        Returns:
            ConversionResult: ``converted`` is False when no rate exists and
            the amount is still expressed in ``from_currency``.
        """
        try:
            converted = self.convert(amount, from_currency, to_currency)
        except RateUnavailable as exc:
            self._logger.warning(
                f"Missing FX rate for {exc.from_currency} to "
                f"{exc.to_currency}; showing unconverted amount"
            )
            return ConversionResult(
                amount=amount,
                currency=normalize_currency_code(from_currency) or from_currency,
                converted=False,
            )
        return ConversionResult(
            amount=converted,
            currency=normalize_currency_code(to_currency) or to_currency,
            converted=True,
        )


__all__ = [
    "RateTable",
    "ConversionResult",
    "CurrencyConverter",
    "default_rate_table",
    "money_places",
    "quantize_money",
]
