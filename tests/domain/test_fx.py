"""Tests for the currency converter and rate table."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from monifly.domain.errors import RateUnavailable, ValidationError
from monifly.domain.services.fx import (
    CurrencyConverter,
    RateTable,
    default_rate_table,
    quantize_money,
)


def test_convert_same_currency_returns_amount_unchanged(converter) -> None:
    """Identity conversion should hand back the very same Decimal."""
    amount = Decimal("12.345")

    assert converter.convert(amount, "usd", "USD") is amount


def test_convert_uses_direct_pair(converter) -> None:
    """A quoted pair should multiply by its rate."""
    assert converter.convert(Decimal("10"), "EUR", "USD") == Decimal("11")


def test_convert_uses_inverse_pair(converter) -> None:
    """The inverse of a quoted pair should be derived."""
    result = converter.convert(Decimal("11"), "USD", "EUR")

    assert quantize_money(result, "EUR") == Decimal("10.00")


def test_convert_uses_cross_rate_through_pivot(converter) -> None:
    """Two non-pivot currencies should convert through USD."""
    assert converter.convert(Decimal("100"), "EUR", "GBP") == Decimal("88")


def test_convert_raises_for_unknown_pair(converter) -> None:
    """Missing rates must raise instead of assuming parity."""
    with pytest.raises(RateUnavailable) as excinfo:
        converter.convert(Decimal("1"), "USD", "JPY")

    assert excinfo.value.from_currency == "USD"
    assert excinfo.value.to_currency == "JPY"


def test_convert_rejects_empty_currency(converter) -> None:
    with pytest.raises(ValidationError):
        converter.convert(Decimal("1"), "", "USD")


def test_try_convert_flags_unconverted_amount() -> None:
    """try_convert should fall back to the source amount and warn."""
    logger = MagicMock()
    converter = CurrencyConverter(RateTable.from_pivot({}), logger=logger)

    result = converter.try_convert(Decimal("5"), "jpy", "USD")

    assert result.amount == Decimal("5")
    assert result.currency == "JPY"
    assert result.converted is False
    logger.warning.assert_called_once()


def test_try_convert_marks_successful_conversion(converter) -> None:
    result = converter.try_convert(Decimal("10"), "EUR", "usd")

    assert result.converted is True
    assert result.currency == "USD"
    assert result.amount == Decimal("11")


def test_from_pivot_rejects_non_positive_rate() -> None:
    with pytest.raises(ValidationError):
        RateTable.from_pivot({"EUR": "0"})


def test_currencies_include_pivot_and_quotes(rate_table) -> None:
    assert rate_table.currencies() == frozenset({"USD", "EUR", "GBP"})


def test_default_rate_table_prices_crypto() -> None:
    converter = CurrencyConverter(default_rate_table(), logger=MagicMock())

    assert converter.convert(Decimal("1"), "BTC", "USD") == Decimal("68000")


def test_update_rates_swaps_table(converter, logger) -> None:
    """Refreshing the table should affect later conversions only."""
    converter.update_rates(RateTable.from_pivot({"EUR": "2"}))

    assert converter.convert(Decimal("3"), "EUR", "USD") == Decimal("6")
    logger.info.assert_called_once()


def test_quantize_money_uses_currency_precision() -> None:
    assert quantize_money(Decimal("1.005"), "USD") == Decimal("1.01")
    assert quantize_money(Decimal("0.123456789"), "BTC") == Decimal("0.12345679")
