"""Tests for the FinancialDomainStore façade."""

from datetime import date
from decimal import Decimal

import pytest

from monifly.domain.errors import (
    InvariantViolation,
    TransactionNotFound,
    ValidationError,
    WalletNotFound,
)
from monifly.domain.models import (
    DebtStatus,
    DebtType,
    FilterPeriod,
    PeriodRange,
    TransactionType,
)
from monifly.domain.services.fx import RateTable


@pytest.fixture
def events(store):
    received = []
    store.subscribe(received.append)
    return received


def test_add_edit_delete_scenario_emits_one_change_per_command(store, events) -> None:
    """Balance goes 100 -> 70 -> 50 -> 100 with exactly four notifications."""
    wallet_id = store.add_wallet("Wallet", "USD", 100)

    tx_id = store.add_transaction(wallet_id, 30, "expense", "groceries")
    assert store.get_wallet_by_id(wallet_id).balance == Decimal("70")

    store.update_transaction(tx_id, amount=50)
    assert store.get_wallet_by_id(wallet_id).balance == Decimal("50")

    store.delete_transaction(tx_id)
    assert store.get_wallet_by_id(wallet_id).balance == Decimal("100")

    assert [change.event for change in events] == [
        "add_wallet",
        "add_transaction",
        "update_transaction",
        "delete_transaction",
    ]
    assert events[-1].state is store.state


def test_moving_transaction_is_a_single_commit(store, events) -> None:
    a = store.add_wallet("A", "USD", 100)
    b = store.add_wallet("B", "USD", 100)
    c = store.add_wallet("C", "USD", 100)
    tx_id = store.add_transaction(a, 30, "expense")
    before = len(events)

    store.update_transaction(tx_id, wallet_id=b)

    assert len(events) == before + 1
    assert store.get_wallet_by_id(a).balance == Decimal("100")
    assert store.get_wallet_by_id(b).balance == Decimal("70")
    assert store.get_wallet_by_id(c).balance == Decimal("100")
    assert store.find_balance_discrepancies() == []


def test_failed_command_leaves_state_untouched(store, events) -> None:
    """A raising command must not commit nor notify."""
    wallet_id = store.add_wallet("Wallet", "USD", 100)
    tx_id = store.add_transaction(wallet_id, 30, "expense")
    snapshot = store.state
    before = len(events)

    with pytest.raises(WalletNotFound):
        store.update_transaction(tx_id, wallet_id="wallet_missing", amount=10)
    with pytest.raises(ValidationError):
        store.add_transaction(wallet_id, -5, "expense")
    with pytest.raises(TransactionNotFound):
        store.delete_transaction("tx_missing")

    assert store.state is snapshot
    assert len(events) == before


def test_unsubscribe_stops_notifications(store) -> None:
    received = []
    unsubscribe = store.subscribe(received.append)
    store.add_wallet("Wallet", "USD")

    unsubscribe()
    store.add_wallet("Other", "USD")

    assert len(received) == 1


def test_failing_listener_does_not_fail_committed_command(store, logger) -> None:
    """Later listeners still run and the caller sees a successful command."""
    received = []

    def failing(change):
        raise OSError("disk full")

    store.subscribe(failing)
    store.subscribe(received.append)

    wallet_id = store.add_wallet("Wallet", "USD", 100)

    assert store.get_wallet_by_id(wallet_id).balance == Decimal("100")
    assert [change.event for change in received] == ["add_wallet"]
    assert received[0].state is store.state
    logger.error.assert_called_once()
    assert "add_wallet" in logger.error.call_args.args[0]


def test_add_transaction_defaults_currency_and_date(store) -> None:
    wallet_id = store.add_wallet("Euro", "EUR", 100)

    tx_id = store.add_transaction(wallet_id, 10, "income", "SALARY")

    transaction = store.get_transactions_by_wallet(wallet_id)[0]
    assert transaction.id == tx_id
    assert transaction.currency == "EUR"
    assert transaction.date == date(2024, 5, 20)
    assert transaction.category == "salary"


def test_unknown_category_is_registered_once(store) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 100)

    store.add_transaction(wallet_id, 5, "expense", "Pets")
    store.add_transaction(wallet_id, 5, "expense", "pets")

    assert store.state.settings.custom_categories == ("Pets",)
    assert len(store.get_transactions_by_category("PETS")) == 2


def test_transaction_lookups(store) -> None:
    cash = store.add_wallet("Cash", "USD", 100)
    bank = store.add_wallet("Bank", "USD", 100)
    store.add_transaction(cash, 5, "expense", date="2024-05-10")
    store.add_transaction(bank, 7, "expense", date="2024-05-11")

    assert [tx.amount for tx in store.get_transactions_by_wallet_name("cash")] == [
        Decimal("5")
    ]
    assert [tx.amount for tx in store.get_transactions_by_date("2024-05-11")] == [
        Decimal("7")
    ]
    assert len(store.get_transactions_in_period("allTime")) == 2


def test_delete_wallet_keeps_history(store, logger) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 100)
    tx_id = store.add_transaction(wallet_id, 5, "expense")

    store.delete_wallet(wallet_id)

    assert store.get_wallet_by_id(wallet_id) is None
    assert len(store.get_transactions_by_wallet(wallet_id)) == 1
    logger.warning.assert_called_once()

    store.delete_transaction(tx_id)
    assert store.state.transactions == ()


def test_update_wallet_and_reorder(store, events) -> None:
    a = store.add_wallet("A", "USD", 100)
    b = store.add_wallet("B", "USD", 100)

    updated = store.update_wallet(a, name="Main", is_default=True)
    store.reorder_wallets([b, a])

    assert updated.name == "Main"
    assert [wallet.id for wallet in store.state.wallets] == [b, a]
    assert events[-1].event == "reorder_wallets"
    with pytest.raises(WalletNotFound):
        store.update_wallet("wallet_missing", name="X")


def test_display_currency_is_read_at_query_time(store) -> None:
    store.add_wallet("Euro", "EUR", 100)

    assert store.get_wallet_balance_distribution()[0].value == Decimal("110.00")

    store.set_primary_display_currency("eur")

    assert store.get_wallet_balance_distribution()[0].value == Decimal("100.00")
    with pytest.raises(ValidationError):
        store.set_primary_display_currency("XYZ")


def test_custom_filter_period_drives_default_queries(store) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 100)
    store.add_transaction(wallet_id, 5, "expense", date="2024-05-02")
    store.add_transaction(wallet_id, 7, "expense", date="2024-05-09")

    resolved = store.set_filter_period("custom", "2024-05-01", "2024-05-05")

    assert resolved == PeriodRange(date(2024, 5, 1), date(2024, 5, 6))
    assert store.state.settings.filter_period is FilterPeriod.CUSTOM
    assert [tx.amount for tx in store.get_transactions_in_period()] == [Decimal("5")]
    with pytest.raises(ValidationError):
        store.set_filter_period("month", "2024-05-01", "2024-05-05")


def test_explicit_custom_period_uses_stored_bounds(store) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 500)
    entry_id = store.add_budget_entry(
        "Groceries",
        100,
        "USD",
        "expense",
        "groceries",
        "once",
        start_date="2024-05-03",
    )
    store.add_transaction(wallet_id, 30, "expense", "groceries", date="2024-05-04")
    store.add_transaction(wallet_id, 12, "expense", "groceries", date="2024-05-15")
    store.set_filter_period("custom", "2024-05-01", "2024-05-10")

    expected = PeriodRange(date(2024, 5, 1), date(2024, 5, 11))
    assert store.get_date_range_for_period("custom") == expected
    assert store.get_date_range_for_period(FilterPeriod.CUSTOM) == expected
    assert store.get_actual_spending_for_budget(
        entry_id,
        FilterPeriod.CUSTOM,
    ) == Decimal("30.00")
    assert store.get_overview("custom").expenses == Decimal("30.00")


def test_explicit_custom_period_without_bounds_is_rejected(store) -> None:
    with pytest.raises(ValidationError):
        store.get_date_range_for_period("custom")


def test_set_rate_table_notifies_and_converts_with_new_rates(store, events) -> None:
    store.add_wallet("Euro", "EUR", 100)

    store.set_rate_table(RateTable.from_pivot({"EUR": "2"}))

    assert events[-1].event == "set_rate_table"
    assert store.get_overview().total_balance == Decimal("200.00")


def test_add_custom_category_returns_canonical_key(store) -> None:
    assert store.add_custom_category(" Hobbies ") == "Hobbies"
    assert store.add_custom_category("hobbies") == "Hobbies"
    assert store.add_custom_category("Groceries") == "groceries"
    assert store.state.settings.custom_categories == ("Hobbies",)


def test_budget_deviation_through_store(store) -> None:
    """Limit 1000 with 1200 spent on groceries this month deviates by +200."""
    wallet_id = store.add_wallet("Cash", "USD", 5000)
    entry_id = store.add_budget_entry(
        "Groceries",
        900,
        "USD",
        "expense",
        "groceries",
        "monthly",
        start_date=date(2024, 1, 1),
        day_of_month=15,
        limit=1000,
    )
    store.add_transaction(wallet_id, 700, "expense", "groceries", date="2024-05-02")
    store.add_transaction(wallet_id, 500, "expense", "groceries", date="2024-05-10")

    assert store.get_actual_spending_for_budget(entry_id) == Decimal("1200.00")
    assert store.get_deviation(entry_id) == Decimal("200")
    assert store.get_next_due_date(entry_id) == date(2024, 6, 15)
    assert store.get_budget_progress()[0].is_over


def test_deactivated_budget_entry_stays_queryable(store) -> None:
    entry_id = store.add_budget_entry(
        "Rent", 800, "USD", "expense", "rent", "monthly", day_of_month=1
    )

    store.update_budget_entry(entry_id, is_active=False)

    assert store.get_budget_entry(entry_id).is_active is False
    assert store.get_budget_progress() == []
    assert store.get_next_due_date(entry_id) is None


def test_budget_entry_with_unknown_wallet_is_rejected(store, events) -> None:
    with pytest.raises(WalletNotFound):
        store.add_budget_entry(
            "Rent",
            800,
            "USD",
            "expense",
            "rent",
            "monthly",
            day_of_month=1,
            wallet_id="wallet_missing",
        )
    assert events == []


def test_debt_payment_updates_debt_and_wallet_atomically(store, events) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 1000)
    debt_id = store.add_debt("Car loan", 500, "USD", DebtType.I_OWE, person_name="Bank")
    before = len(events)

    payment_id = store.record_debt_payment(debt_id, 200, wallet_id=wallet_id)

    assert len(events) == before + 1
    debt = store.get_debt_by_id(debt_id)
    assert debt.status is DebtStatus.PARTIALLY_PAID
    assert store.get_wallet_by_id(wallet_id).balance == Decimal("800")
    payment = store.get_debt_payments(debt_id)[0]
    assert payment.id == payment_id
    transaction = store.get_transactions_by_wallet(wallet_id)[0]
    assert transaction.id == payment.transaction_id
    assert transaction.type is TransactionType.EXPENSE
    assert transaction.description == "Debt payment to Bank (Car loan)"


def test_rejected_overpayment_touches_neither_debt_nor_wallet(store, events) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 1000)
    debt_id = store.add_debt("Car loan", 500, "USD", "iOwe")
    snapshot = store.state
    before = len(events)

    with pytest.raises(InvariantViolation):
        store.record_debt_payment(debt_id, 600, wallet_id=wallet_id)

    assert store.state is snapshot
    assert len(events) == before


def test_lending_moves_money_out_and_back(store) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 1000)

    debt_id = store.add_debt(
        "Loan to Sam",
        300,
        "USD",
        DebtType.OWED_TO_ME,
        initial_wallet_id=wallet_id,
    )
    assert store.get_wallet_by_id(wallet_id).balance == Decimal("700")

    store.record_debt_payment(debt_id, 100, wallet_id=wallet_id)

    assert store.get_wallet_by_id(wallet_id).balance == Decimal("800")
    assert [debt.id for debt in store.get_debts_owed_to_me()] == [debt_id]
    assert store.get_debts_i_owe() == []


def test_lending_beyond_wallet_balance_is_rejected(store) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 100)

    with pytest.raises(ValidationError):
        store.add_debt(
            "Loan to Sam",
            5000,
            "USD",
            DebtType.OWED_TO_ME,
            initial_wallet_id=wallet_id,
        )

    assert store.state.debts == ()
    assert store.get_wallet_by_id(wallet_id).balance == Decimal("100")


def test_cancel_and_delete_debt(store) -> None:
    debt_id = store.add_debt("Phone", 100, "USD", "iOwe", due_date="2024-05-25")
    other_id = store.add_debt("Laptop", 900, "USD", "iOwe", due_date="2024-06-25")
    store.record_debt_payment(other_id, 100)

    store.cancel_debt(debt_id)
    assert [reminder.debt_id for reminder in store.get_debt_reminders()] == [other_id]

    store.delete_debt(other_id)
    assert store.get_debt_payments(other_id) == []
    assert [debt.id for debt in store.state.debts] == [debt_id]


def test_cashflow_forecast_rejects_unknown_horizon(store) -> None:
    with pytest.raises(ValidationError):
        store.get_cashflow_forecast(4)


def test_financial_context_lists_wallets(store) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 100)
    store.add_transaction(wallet_id, 50, "income", "salary", description="Salary")

    context = store.build_financial_context()

    assert "- Cash: 150 USD" in context
    assert "- Salary (category: salary): +50 USD" in context


def test_total_outstanding_debt_by_type(store) -> None:
    store.add_debt("Car loan", 500, "USD", "iOwe")
    store.add_debt("Rent share", 100, "EUR", "iOwe")
    lent_id = store.add_debt("Loan to Sam", 300, "USD", "owedToMe")
    store.record_debt_payment(lent_id, 100)

    assert store.get_total_outstanding_debt() == Decimal("810.00")
    assert store.get_total_outstanding_debt("iOwe") == Decimal("610.00")
    assert store.get_total_outstanding_debt(DebtType.OWED_TO_ME) == Decimal("200.00")


def test_buy_and_sell_crypto_move_wallet_and_holding_together(store, events) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 10000)
    before = len(events)

    holding_id = store.buy_crypto(wallet_id, "BTC", "0.1", 60000, name="Bitcoin")

    assert len(events) == before + 1
    assert events[-1].event == "buy_crypto"
    assert store.get_wallet_by_id(wallet_id).balance == Decimal("4000.00")
    purchase = store.get_transactions_by_wallet(wallet_id)[0]
    assert purchase.category == "crypto"
    assert purchase.type is TransactionType.EXPENSE
    assert purchase.description == "Buy 0.1 BTC"
    assert store.get_crypto_holding(holding_id).amount == Decimal("0.1")

    proceeds = store.sell_crypto(wallet_id, holding_id, "0.1", 65000)

    assert proceeds == Decimal("6500.00")
    assert store.get_wallet_by_id(wallet_id).balance == Decimal("10500.00")
    assert store.state.crypto_holdings == ()
    assert store.find_balance_discrepancies() == []

    flows = store.get_period_crypto_flows()
    assert flows.purchases == Decimal("6000.00")
    assert flows.sales == Decimal("6500.00")


def test_rejected_crypto_purchase_changes_nothing(store, events) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 100)
    snapshot = store.state
    before = len(events)

    with pytest.raises(ValidationError):
        store.buy_crypto(wallet_id, "BTC", 1, 60000)
    with pytest.raises(WalletNotFound):
        store.buy_crypto("wallet_missing", "BTC", 1, 1)

    assert store.state is snapshot
    assert len(events) == before


def test_total_crypto_value_follows_display_currency(store) -> None:
    wallet_id = store.add_wallet("Cash", "USD", 10000)
    store.buy_crypto(wallet_id, "ETH", 2, 3000)
    store.set_rate_table(RateTable.from_pivot({"ETH": "3500", "EUR": "1.25"}))

    assert store.get_total_crypto_value() == Decimal("7000.00")
    store.set_primary_display_currency("EUR")
    assert store.get_total_crypto_value() == Decimal("5600.00")
