"""Tests for crypto holdings and their valuation."""

from datetime import date
from decimal import Decimal

import pytest

from monifly.domain.errors import (
    CryptoHoldingNotFound,
    RateUnavailable,
    ValidationError,
)
from monifly.domain.models import (
    PeriodRange,
    Transaction,
    TransactionType,
    Wallet,
)
from monifly.domain.services.crypto import CryptoPortfolio
from monifly.domain.services.fx import CurrencyConverter, RateTable


MAY = PeriodRange(start=date(2024, 5, 1), end=date(2024, 6, 1))


@pytest.fixture
def portfolio(converter, logger, id_factory) -> CryptoPortfolio:
    return CryptoPortfolio(converter, logger=logger, id_factory=id_factory)


def _wallet(balance="100000", currency="USD") -> Wallet:
    return Wallet(
        id="w1",
        name="Cash",
        currency=currency,
        balance=Decimal(balance),
        opening_balance=Decimal(balance),
    )


def _buy(portfolio, holdings=(), **overrides):
    kwargs = {
        "asset": "btc",
        "amount": "0.1",
        "price_per_unit": 60000,
        "fiat_currency": "USD",
        "purchase_date": "2024-05-02",
    }
    kwargs.update(overrides)
    wallet = kwargs.pop("wallet", _wallet())
    return portfolio.buy(holdings, wallet, **kwargs)


def test_buy_creates_holding_and_expense_trade(portfolio) -> None:
    holdings, holding, trade = _buy(portfolio, name="Bitcoin")

    assert holdings == (holding,)
    assert holding.id == "crypto_1"
    assert holding.asset == "BTC"
    assert holding.name == "Bitcoin"
    assert holding.amount == Decimal("0.1")
    assert holding.purchase_date == date(2024, 5, 2)
    assert trade.total == Decimal("6000.00")
    assert trade.type is TransactionType.EXPENSE
    assert trade.description == "Buy 0.1 BTC"


def test_second_buy_averages_purchase_price(portfolio) -> None:
    holdings, first, _ = _buy(portfolio, amount=1, price_per_unit=6000)

    holdings, holding, _ = _buy(
        portfolio,
        holdings,
        amount=1,
        price_per_unit=7000,
        purchase_date="2024-05-10",
    )

    assert len(holdings) == 1
    assert holding.id == first.id
    assert holding.amount == Decimal("2")
    assert holding.purchase_price == Decimal("6500")
    assert holding.purchase_date == date(2024, 5, 2)


def test_second_buy_in_other_currency_converts_cost(portfolio) -> None:
    holdings, _, _ = _buy(portfolio, amount=1, price_per_unit=1100)

    _, holding, trade = _buy(
        portfolio,
        holdings,
        amount=1,
        price_per_unit=1000,
        fiat_currency="EUR",
    )

    assert trade.currency == "EUR"
    assert holding.purchase_currency == "USD"
    assert holding.purchase_price == Decimal("1100")


@pytest.mark.parametrize(
    "overrides",
    [
        {"asset": "USD"},
        {"amount": 0},
        {"amount": "0.000000001"},
        {"price_per_unit": -1},
        {"fiat_currency": "XYZ"},
        {"wallet": _wallet(balance="100")},
    ],
)
def test_buy_rejects_invalid_input(portfolio, overrides) -> None:
    with pytest.raises(ValidationError):
        _buy(portfolio, **overrides)


def test_buy_without_rate_to_wallet_currency_raises(portfolio) -> None:
    with pytest.raises(RateUnavailable):
        _buy(portfolio, fiat_currency="JPY", wallet=_wallet(currency="EUR"))


def test_partial_sell_keeps_holding(portfolio) -> None:
    holdings, holding, _ = _buy(portfolio, amount=1)

    holdings, trade = portfolio.sell(
        holdings,
        holding.id,
        amount="0.25",
        price_per_unit=64000,
        fiat_currency="USD",
    )

    assert holdings[0].amount == Decimal("0.75")
    assert trade.total == Decimal("16000.00")
    assert trade.type is TransactionType.INCOME
    assert trade.description == "Sell 0.25 BTC"


def test_selling_everything_drops_holding(portfolio) -> None:
    holdings, holding, _ = _buy(portfolio, amount="0.5")

    holdings, _ = portfolio.sell(
        holdings,
        holding.id,
        amount="0.5",
        price_per_unit=1,
        fiat_currency="USD",
    )

    assert holdings == ()


def test_sell_more_than_held_raises(portfolio) -> None:
    holdings, holding, _ = _buy(portfolio, amount="0.5")

    with pytest.raises(ValidationError):
        portfolio.sell(
            holdings,
            holding.id,
            amount=1,
            price_per_unit=1,
            fiat_currency="USD",
        )
    with pytest.raises(CryptoHoldingNotFound):
        portfolio.sell(
            holdings,
            "crypto_missing",
            amount=1,
            price_per_unit=1,
            fiat_currency="USD",
        )


def test_total_value_uses_rate_table_and_skips_unpriced(logger, id_factory) -> None:
    converter = CurrencyConverter(
        RateTable.from_pivot({"BTC": "60000", "EUR": "1.25"}),
        logger=logger,
    )
    portfolio = CryptoPortfolio(converter, logger=logger, id_factory=id_factory)
    holdings, _, _ = _buy(portfolio, amount="0.5")
    holdings, _, _ = _buy(portfolio, holdings, asset="ETH", amount=2, price_per_unit=1)

    assert portfolio.total_value(holdings, "USD") == Decimal("30000.00")
    assert portfolio.total_value(holdings, "EUR") == Decimal("24000.00")
    logger.warning.assert_called()


def test_period_flows_split_purchases_and_sales(portfolio) -> None:
    def _tx(tx_id, amount, type, day, category="crypto", currency="USD"):
        return Transaction(
            id=tx_id,
            date=day,
            description="",
            amount=Decimal(amount),
            currency=currency,
            type=type,
            category=category,
            wallet_id="w1",
            wallet_amount=Decimal(amount),
        )

    transactions = (
        _tx("t1", "600", TransactionType.EXPENSE, date(2024, 5, 2)),
        _tx("t2", "100", TransactionType.EXPENSE, date(2024, 5, 3), currency="EUR"),
        _tx("t3", "250", TransactionType.INCOME, date(2024, 5, 9)),
        _tx("t4", "999", TransactionType.EXPENSE, date(2024, 4, 30)),
        _tx("t5", "40", TransactionType.EXPENSE, date(2024, 5, 4), category="groceries"),
    )

    flows = portfolio.period_flows(transactions, MAY, "USD")

    assert flows.purchases == Decimal("710.00")
    assert flows.sales == Decimal("250.00")
    assert flows.net == Decimal("-460.00")
    assert flows.currency == "USD"
