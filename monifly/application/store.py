"""Façade owning the finance snapshot and exposing commands and queries.

Every command validates its input, builds the complete next snapshot through
the owning domain service and then commits it with a single assignment and a
single change notification. A command that raises leaves the snapshot and
the subscribers untouched. Once committed, a command never raises because
of a subscriber: listener errors are logged and the remaining listeners
are still notified.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any

from monifly.application.serialization import (
    state_from_document,
    state_to_document,
)
from monifly.application.use_cases import (
    BuildFinancialContextUseCase,
    GetCategoryExpenseBreakdownUseCase,
    GetOverviewUseCase,
    GetPeriodTransactionSummaryUseCase,
)
from monifly.domain.constants import KNOWN_CURRENCIES
from monifly.domain.errors import ValidationError
from monifly.domain.models import (
    BalanceDiscrepancy,
    BudgetEntry,
    BudgetProgress,
    CashflowForecastPoint,
    CryptoFlowSummary,
    CryptoHolding,
    CryptoTrade,
    Debt,
    DebtPayment,
    DebtReminder,
    DebtType,
    DistributionSlice,
    FilterPeriod,
    FinancialState,
    OverviewSummary,
    PeriodRange,
    PeriodSummaryPoint,
    Transaction,
    TransactionCategory,
    Wallet,
)
from monifly.domain.services.budgeting import BudgetProjector
from monifly.domain.services.crypto import CryptoPortfolio
from monifly.domain.services.debts import DebtTracker
from monifly.domain.services.fx import CurrencyConverter, RateTable
from monifly.domain.services.ledger import WalletLedger
from monifly.domain.services.normalization import (
    categories_match,
    is_builtin_category,
    normalize_category,
)
from monifly.domain.services.periods import PeriodResolver, parse_filter_period
from monifly.domain.services.validation import (
    parse_enum,
    parse_iso_date,
    require_currency,
    require_text,
)
from monifly.infrastructure.logging.logger import get_app_logger
from monifly.utils.ids import generate_id


@dataclass(frozen=True)
class StoreChange:
    """Notification sent to subscribers after a successful command.

    Attributes:
        event: Name of the command that produced the change.
        state: Snapshot committed by the command.
    """

    event: str
    state: FinancialState


Listener = Callable[[StoreChange], None]


class FinancialDomainStore:
    """Single command/query surface over wallets, budgets and debts."""

    def __init__(
        self,
        state: FinancialState | None = None,
        *,
        converter: CurrencyConverter | None = None,
        resolver: PeriodResolver | None = None,
        logger=None,
        id_factory: Callable[[str], str] = generate_id,
        known_currencies: Iterable[str] = KNOWN_CURRENCIES,
    ) -> None:
        """Initialize the store.

        Args:
            state: Initial snapshot; an empty one when omitted.
            converter: Converter holding the injected rate table.
            resolver: Period resolver holding the clock and week start.
            logger: Optional logger compatible with logging.Logger-like API.
            id_factory: Callable producing ids from a prefix.
            known_currencies: Codes accepted in addition to the rate table's.
        """
        self._logger = logger or get_app_logger()
        self._converter = converter or CurrencyConverter(logger=self._logger)
        self._resolver = resolver or PeriodResolver()
        self._id_factory = id_factory
        self._known_currencies = frozenset(known_currencies)

        self._ledger = WalletLedger(
            self._converter,
            logger=self._logger,
            known_currencies=self._known_currencies,
            id_factory=id_factory,
        )
        self._budget = BudgetProjector(
            self._converter,
            self._resolver,
            logger=self._logger,
            known_currencies=self._known_currencies,
            id_factory=id_factory,
        )
        self._debts = DebtTracker(
            self._converter,
            self._resolver,
            logger=self._logger,
            known_currencies=self._known_currencies,
            id_factory=id_factory,
        )
        self._crypto = CryptoPortfolio(
            self._converter,
            logger=self._logger,
            known_currencies=self._known_currencies,
            id_factory=id_factory,
        )
        self._overview = GetOverviewUseCase(self._converter, logger=self._logger)
        self._breakdown = GetCategoryExpenseBreakdownUseCase(
            self._converter,
            logger=self._logger,
        )
        self._period_summary = GetPeriodTransactionSummaryUseCase(
            self._converter,
            logger=self._logger,
        )
        self._context = BuildFinancialContextUseCase(logger=self._logger)

        self._state = state or FinancialState()
        self._listeners: list[Listener] = []

    @classmethod
    def from_document(
        cls,
        document: Mapping[str, Any],
        **kwargs,
    ) -> "FinancialDomainStore":
        """Build a store from a persisted document.

        Wallets whose balance no longer matches their transactions are
        reported as warnings; the document is loaded as stored.
        """
        store = cls(state_from_document(dict(document)), **kwargs)
        store.audit_balances()
        return store

    # ------------------------------------------------------------------
    # State and subscriptions
    # ------------------------------------------------------------------
    @property
    def state(self) -> FinancialState:
        return self._state

    @property
    def converter(self) -> CurrencyConverter:
        return self._converter

    @property
    def resolver(self) -> PeriodResolver:
        return self._resolver

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def to_document(self) -> dict[str, Any]:
        return state_to_document(self._state)

    def _commit(self, event: str, state: FinancialState) -> None:
        self._state = state
        self._logger.info(f"Store command applied: {event}")
        change = StoreChange(event=event, state=state)
        for listener in tuple(self._listeners):
            try:
                listener(change)
            except Exception as exc:
                self._logger.error(
                    f"Store listener failed after {event}: {exc!r}"
                )

    # ------------------------------------------------------------------
    # Wallet commands
    # ------------------------------------------------------------------
    def add_wallet(
        self,
        name: str,
        currency: str,
        initial_balance=Decimal("0"),
        icon: str | None = None,
        color: str | None = None,
        is_default: bool = False,
    ) -> str:
        """Create a wallet and return its id."""
        wallets, wallet = self._ledger.add_wallet(
            self._state.wallets,
            name,
            currency,
            initial_balance,
            icon,
            color,
            is_default=is_default,
        )
        self._commit("add_wallet", replace(self._state, wallets=wallets))
        return wallet.id

    def update_wallet(self, wallet_id: str, **patch) -> Wallet:
        """Update name, currency, color, icon, balance or is_default."""
        wallets, wallet = self._ledger.update_wallet(
            self._state.wallets,
            wallet_id,
            patch,
        )
        self._commit("update_wallet", replace(self._state, wallets=wallets))
        return wallet

    def delete_wallet(self, wallet_id: str) -> None:
        """Delete a wallet. Its transactions stay in the history."""
        wallets = self._ledger.delete_wallet(self._state.wallets, wallet_id)
        orphaned = len(self.get_transactions_by_wallet(wallet_id))
        if orphaned:
            self._logger.warning(
                f"Wallet {wallet_id} deleted with {orphaned} transactions kept"
            )
        self._commit("delete_wallet", replace(self._state, wallets=wallets))

    def reorder_wallets(self, ordered_ids: Iterable[str]) -> None:
        wallets = self._ledger.reorder_wallets(self._state.wallets, ordered_ids)
        self._commit("reorder_wallets", replace(self._state, wallets=wallets))

    # ------------------------------------------------------------------
    # Transaction commands
    # ------------------------------------------------------------------
    def add_transaction(
        self,
        wallet_id: str,
        amount,
        type,
        category: str | None = None,
        description: str = "",
        currency: str | None = None,
        date=None,
        notes: str = "",
    ) -> str:
        """Record a transaction and apply it to its wallet.

        Args:
            wallet_id: Wallet affected by the transaction.
            amount: Non-negative amount; the sign comes from ``type``.
            type: ``income`` or ``expense``.
            category: Built-in or custom category; ``other`` when empty.
            description: Free-text description.
            currency: Currency of ``amount``; the wallet's when omitted.
            date: ISO date or ``date``; today when omitted.
            notes: Free-text notes.

        Returns:
            str: Id of the new transaction.
        """
        wallet = self._ledger.require_wallet(self._state.wallets, wallet_id)
        settings, canonical = self._register_category(category)
        wallets, transactions, transaction = self._ledger.add_transaction(
            self._state.wallets,
            self._state.transactions,
            wallet_id=wallet_id,
            description=description,
            amount=amount,
            currency=currency or wallet.currency,
            type=type,
            category=canonical,
            date=date if date is not None else self._resolver.today(),
            notes=notes,
        )
        self._commit(
            "add_transaction",
            replace(
                self._state,
                wallets=wallets,
                transactions=transactions,
                settings=settings,
            ),
        )
        return transaction.id

    def update_transaction(self, transaction_id: str, **patch) -> Transaction:
        """Edit a transaction; the balance moves in one step."""
        settings = self._state.settings
        if "category" in patch:
            settings, patch["category"] = self._register_category(
                patch["category"]
            )
        wallets, transactions, transaction = self._ledger.update_transaction(
            self._state.wallets,
            self._state.transactions,
            transaction_id,
            patch,
        )
        self._commit(
            "update_transaction",
            replace(
                self._state,
                wallets=wallets,
                transactions=transactions,
                settings=settings,
            ),
        )
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        wallets, transactions, _ = self._ledger.delete_transaction(
            self._state.wallets,
            self._state.transactions,
            transaction_id,
        )
        self._commit(
            "delete_transaction",
            replace(self._state, wallets=wallets, transactions=transactions),
        )

    # ------------------------------------------------------------------
    # Budget commands
    # ------------------------------------------------------------------
    def add_budget_entry(
        self,
        description: str,
        amount,
        currency: str,
        type,
        category: str | None,
        frequency,
        start_date=None,
        day_of_month: int | None = None,
        limit=None,
        is_active: bool = True,
        wallet_id: str | None = None,
    ) -> str:
        """Create a budget entry and return its id."""
        if wallet_id is not None:
            self._ledger.require_wallet(self._state.wallets, wallet_id)
        settings, canonical = self._register_category(category)
        entries, entry = self._budget.add_budget_entry(
            self._state.budget_entries,
            description=description,
            amount=amount,
            currency=currency,
            type=type,
            category=canonical,
            frequency=frequency,
            start_date=(
                start_date if start_date is not None else self._resolver.today()
            ),
            day_of_month=day_of_month,
            limit=limit,
            is_active=is_active,
            wallet_id=wallet_id,
        )
        self._commit(
            "add_budget_entry",
            replace(self._state, budget_entries=entries, settings=settings),
        )
        return entry.id

    def update_budget_entry(self, entry_id: str, **patch) -> BudgetEntry:
        """Update an entry; ``is_active=False`` deactivates it."""
        if patch.get("wallet_id") is not None:
            self._ledger.require_wallet(self._state.wallets, patch["wallet_id"])
        settings = self._state.settings
        if "category" in patch:
            settings, patch["category"] = self._register_category(
                patch["category"]
            )
        entries, entry = self._budget.update_budget_entry(
            self._state.budget_entries,
            entry_id,
            patch,
        )
        self._commit(
            "update_budget_entry",
            replace(self._state, budget_entries=entries, settings=settings),
        )
        return entry

    def delete_budget_entry(self, entry_id: str) -> None:
        entries = self._budget.delete_budget_entry(
            self._state.budget_entries,
            entry_id,
        )
        self._commit(
            "delete_budget_entry",
            replace(self._state, budget_entries=entries),
        )

    # ------------------------------------------------------------------
    # Debt commands
    # ------------------------------------------------------------------
    def add_debt(
        self,
        title: str | None,
        amount,
        currency: str,
        type,
        due_date=None,
        start_date=None,
        interest_rate=Decimal("0"),
        person_name: str | None = None,
        description: str | None = None,
        initial_wallet_id: str | None = None,
    ) -> str:
        """Register a debt, optionally moving the money through a wallet.

        With ``initial_wallet_id`` a received loan is credited to the wallet
        and a granted loan is debited from it, in the same commit.

        Raises:
            ValidationError: If lending exceeds the wallet balance.
        """
        debts, debt = self._debts.add_debt(
            self._state.debts,
            title=title,
            amount=amount,
            currency=currency,
            type=type,
            start_date=start_date,
            due_date=due_date,
            interest_rate=interest_rate,
            person_name=person_name,
            description=description,
            initial_wallet_id=initial_wallet_id,
        )
        state = replace(self._state, debts=debts)
        if initial_wallet_id is not None:
            wallet = self._ledger.require_wallet(state.wallets, initial_wallet_id)
            self._debts.check_disbursement_funds(debt, wallet)
            wallets, transactions, _ = self._ledger.add_transaction(
                state.wallets,
                state.transactions,
                wallet_id=wallet.id,
                description=self._debts.describe_disbursement(debt),
                amount=debt.amount,
                currency=debt.currency,
                type=self._debts.disbursement_transaction_type(debt),
                category=TransactionCategory.OTHER.value,
                date=debt.start_date,
            )
            state = replace(state, wallets=wallets, transactions=transactions)
        self._commit("add_debt", state)
        return debt.id

    def delete_debt(self, debt_id: str) -> None:
        debts, payments = self._debts.delete_debt(
            self._state.debts,
            self._state.payments,
            debt_id,
        )
        self._commit(
            "delete_debt",
            replace(self._state, debts=debts, payments=payments),
        )

    def cancel_debt(self, debt_id: str) -> Debt:
        debts, debt = self._debts.cancel_debt(self._state.debts, debt_id)
        self._commit("cancel_debt", replace(self._state, debts=debts))
        return debt

    def record_debt_payment(
        self,
        debt_id: str,
        amount,
        currency: str | None = None,
        date=None,
        wallet_id: str | None = None,
        allow_overpayment: bool = False,
        note: str = "",
    ) -> str:
        """Record a payment and, with a wallet, the matching transaction.

        The payment log entry, the debt update and the wallet transaction
        are committed together.

        Returns:
            str: Id of the payment entry.
        """
        debt = self._debts.require_debt(self._state.debts, debt_id)
        if wallet_id is not None:
            self._ledger.require_wallet(self._state.wallets, wallet_id)
        payment_date = date if date is not None else self._resolver.today()
        transaction_id = self._id_factory("tx") if wallet_id is not None else None
        debts, payments, payment = self._debts.record_payment(
            self._state.debts,
            self._state.payments,
            debt_id,
            amount=amount,
            currency=currency or debt.currency,
            payment_date=payment_date,
            wallet_id=wallet_id,
            transaction_id=transaction_id,
            allow_overpayment=allow_overpayment,
            note=note,
        )
        state = replace(self._state, debts=debts, payments=payments)
        if wallet_id is not None:
            wallets, transactions, _ = self._ledger.add_transaction(
                state.wallets,
                state.transactions,
                wallet_id=wallet_id,
                description=self._debts.describe_payment(debt, note),
                amount=payment.amount,
                currency=payment.currency,
                type=self._debts.payment_transaction_type(debt),
                category=TransactionCategory.OTHER.value,
                date=payment.date,
                transaction_id=transaction_id,
            )
            state = replace(state, wallets=wallets, transactions=transactions)
        self._commit("record_debt_payment", state)
        return payment.id

    # ------------------------------------------------------------------
    # Crypto commands
    # ------------------------------------------------------------------
    def buy_crypto(
        self,
        wallet_id: str,
        asset: str,
        amount,
        price_per_unit,
        fiat_currency: str | None = None,
        name: str | None = None,
        date=None,
    ) -> str:
        """Buy crypto units paid from a fiat wallet.

        The holding update and the wallet expense are committed together.

        Args:
            wallet_id: Wallet paying for the purchase.
            asset: Asset symbol such as ``BTC``.
            amount: Units bought.
            price_per_unit: Price of one unit in ``fiat_currency``.
            fiat_currency: Currency of the price; the wallet's when omitted.
            name: Display name for a new holding.
            date: ISO date or ``date``; today when omitted.

        Returns:
            str: Id of the affected holding.

        Raises:
            ValidationError: If the wallet cannot cover the purchase.
        """
        wallet = self._ledger.require_wallet(self._state.wallets, wallet_id)
        trade_date = date if date is not None else self._resolver.today()
        holdings, holding, trade = self._crypto.buy(
            self._state.crypto_holdings,
            wallet,
            asset=asset,
            amount=amount,
            price_per_unit=price_per_unit,
            fiat_currency=fiat_currency or wallet.currency,
            purchase_date=trade_date,
            name=name,
        )
        self._commit(
            "buy_crypto",
            self._apply_trade(wallet.id, trade, trade_date, holdings),
        )
        return holding.id

    def sell_crypto(
        self,
        wallet_id: str,
        holding_id: str,
        amount,
        price_per_unit,
        fiat_currency: str | None = None,
        date=None,
    ) -> Decimal:
        """Sell units of a holding and credit the proceeds to a wallet.

        Returns:
            Decimal: Proceeds in the fiat currency.
        """
        wallet = self._ledger.require_wallet(self._state.wallets, wallet_id)
        holdings, trade = self._crypto.sell(
            self._state.crypto_holdings,
            holding_id,
            amount=amount,
            price_per_unit=price_per_unit,
            fiat_currency=fiat_currency or wallet.currency,
        )
        trade_date = date if date is not None else self._resolver.today()
        self._commit(
            "sell_crypto",
            self._apply_trade(wallet.id, trade, trade_date, holdings),
        )
        return trade.total

    # ------------------------------------------------------------------
    # Settings commands
    # ------------------------------------------------------------------
    def set_primary_display_currency(self, currency: str) -> None:
        code = require_currency(currency, self._recognized_currencies())
        settings = replace(self._state.settings, primary_display_currency=code)
        self._commit(
            "set_primary_display_currency",
            replace(self._state, settings=settings),
        )

    def set_filter_period(
        self,
        period,
        custom_start=None,
        custom_end=None,
    ) -> PeriodRange:
        """Select the period used by default in aggregate queries.

        Returns:
            PeriodRange: The period resolved for today.
        """
        key = parse_filter_period(period)
        start = parse_iso_date(custom_start, "custom_start") if custom_start else None
        end = parse_iso_date(custom_end, "custom_end") if custom_end else None
        if key is not FilterPeriod.CUSTOM and (start or end):
            raise ValidationError("custom bounds require the custom period")
        resolved = self._resolver.resolve(key, custom_start=start, custom_end=end)
        settings = replace(
            self._state.settings,
            filter_period=key,
            custom_period_start=start,
            custom_period_end=end,
        )
        self._commit("set_filter_period", replace(self._state, settings=settings))
        return resolved

    def set_rate_table(self, rate_table: RateTable) -> None:
        """Swap the injected rate table; stored amounts are not touched."""
        self._converter.update_rates(rate_table)
        self._commit("set_rate_table", self._state)

    def add_custom_category(self, name: str) -> str:
        """Register a custom category and return its canonical key."""
        require_text(name, "category")
        settings, canonical = self._register_category(name)
        self._commit("add_custom_category", replace(self._state, settings=settings))
        return canonical

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_wallet_by_id(self, wallet_id: str) -> Wallet | None:
        return self._ledger.get_wallet_by_id(self._state.wallets, wallet_id)

    def get_wallet_balance_distribution(self) -> list[DistributionSlice]:
        return self._ledger.get_wallet_balance_distribution(
            self._state.wallets,
            self._state.settings.primary_display_currency,
        )

    def get_transactions_by_wallet(self, wallet_id: str) -> list[Transaction]:
        return [tx for tx in self._state.transactions if tx.wallet_id == wallet_id]

    def get_transactions_by_date(self, day) -> list[Transaction]:
        target = parse_iso_date(day)
        return [tx for tx in self._state.transactions if tx.date == target]

    def get_transactions_by_wallet_name(self, name: str) -> list[Transaction]:
        """Return transactions of every wallet with this name (any case)."""
        folded = (name or "").strip().casefold()
        wallet_ids = {
            wallet.id
            for wallet in self._state.wallets
            if wallet.name.casefold() == folded
        }
        return [tx for tx in self._state.transactions if tx.wallet_id in wallet_ids]

    def get_transactions_by_category(self, category: str) -> list[Transaction]:
        return [
            tx
            for tx in self._state.transactions
            if categories_match(tx.category, category)
        ]

    def get_transactions_in_period(self, period=None) -> list[Transaction]:
        period_range = self._period_range(period)
        return [
            tx for tx in self._state.transactions if period_range.contains(tx.date)
        ]

    def get_date_range_for_period(
        self,
        period=None,
        reference_date: date | None = None,
    ) -> PeriodRange:
        """Resolve a period key, the selected filter period by default.

        ``custom`` uses the bounds stored by ``set_filter_period``.
        """
        settings = self._state.settings
        key = settings.filter_period if period is None else parse_filter_period(period)
        if key is not FilterPeriod.CUSTOM:
            return self._resolver.resolve(key, reference_date)
        return self._resolver.resolve(
            key,
            reference_date,
            custom_start=settings.custom_period_start,
            custom_end=settings.custom_period_end,
        )

    def get_budget_entry(self, entry_id: str) -> BudgetEntry:
        """Return an entry, active or not."""
        return self._budget.require_entry(self._state.budget_entries, entry_id)

    def get_actual_spending_for_budget(self, entry_id: str, period=None) -> Decimal:
        return self._budget.get_actual_spending_for_budget(
            self.get_budget_entry(entry_id),
            self._state.transactions,
            self._period_range(period),
        )

    def get_deviation(self, entry_id: str, period=None) -> Decimal:
        """Return actual minus planned; positive means overspend."""
        return self._budget.get_deviation(
            self.get_budget_entry(entry_id),
            self._state.transactions,
            self._period_range(period),
        )

    def get_budget_progress(self, period=None) -> list[BudgetProgress]:
        return self._budget.get_budget_progress(
            self._state.budget_entries,
            self._state.transactions,
            self._period_range(period),
        )

    def get_budget_distribution(self) -> list[DistributionSlice]:
        return self._budget.get_budget_distribution(
            self._state.budget_entries,
            self._state.settings.primary_display_currency,
        )

    def get_next_due_date(self, entry_id: str) -> date | None:
        return self._budget.next_due_date(self.get_budget_entry(entry_id))

    def get_debt_by_id(self, debt_id: str) -> Debt:
        return self._debts.require_debt(self._state.debts, debt_id)

    def get_debts_i_owe(self, include_cancelled: bool = False) -> list[Debt]:
        return self._debts.get_debts_i_owe(self._state.debts, include_cancelled)

    def get_debts_owed_to_me(self, include_cancelled: bool = False) -> list[Debt]:
        return self._debts.get_debts_owed_to_me(self._state.debts, include_cancelled)

    def get_debt_payments(self, debt_id: str) -> list[DebtPayment]:
        return self._debts.get_payments_for_debt(self._state.payments, debt_id)

    def get_debt_reminders(self, today: date | None = None) -> list[DebtReminder]:
        return self._debts.get_due_reminders(self._state.debts, today)

    def get_total_outstanding_debt(self, debt_type=None) -> Decimal:
        """Sum what is still open on debts, in the display currency.

        Args:
            debt_type: Optional ``DebtType`` to restrict the sum to.
        """
        debts = self._state.debts
        if debt_type is not None:
            wanted = parse_enum(DebtType, debt_type, "debt_type")
            debts = tuple(debt for debt in debts if debt.type is wanted)
        return self._debts.total_outstanding(
            debts,
            self._state.settings.primary_display_currency,
        )

    def get_crypto_holding(self, holding_id: str) -> CryptoHolding:
        return self._crypto.require_holding(self._state.crypto_holdings, holding_id)

    def get_total_crypto_value(self) -> Decimal:
        """Value all holdings at current rates in the display currency."""
        return self._crypto.total_value(
            self._state.crypto_holdings,
            self._state.settings.primary_display_currency,
        )

    def get_period_crypto_flows(self, period=None) -> CryptoFlowSummary:
        return self._crypto.period_flows(
            self._state.transactions,
            self._period_range(period),
            self._state.settings.primary_display_currency,
        )

    def get_overview(self, period=None) -> OverviewSummary:
        return self._overview.execute(self._state, self._period_range(period))

    def get_category_expense_breakdown(self, period=None) -> list[DistributionSlice]:
        return self._breakdown.execute(self._state, self._period_range(period))

    def get_period_transaction_summary(
        self,
        period=None,
    ) -> list[PeriodSummaryPoint]:
        return self._period_summary.execute(
            self._state,
            self._period_range(period),
            self._resolver.today(),
        )

    def get_cashflow_forecast(self, months: int = 3) -> list[CashflowForecastPoint]:
        return self._budget.calculate_cashflow_forecast(
            months,
            self._state.wallets,
            self._state.transactions,
            self._state.budget_entries,
            self._state.settings.primary_display_currency,
        )

    def build_financial_context(self) -> str:
        return self._context.execute(self._state, self._resolver.today())

    def find_balance_discrepancies(self) -> list[BalanceDiscrepancy]:
        return self._ledger.find_balance_discrepancies(
            self._state.wallets,
            self._state.transactions,
        )

    def audit_balances(self) -> list[BalanceDiscrepancy]:
        """Log a warning for every wallet out of step with its history."""
        discrepancies = self.find_balance_discrepancies()
        for discrepancy in discrepancies:
            self._logger.warning(
                f"Wallet {discrepancy.wallet_id} balance {discrepancy.actual} "
                f"differs from its history ({discrepancy.expected})"
            )
        return discrepancies

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _period_range(self, period) -> PeriodRange:
        if isinstance(period, PeriodRange):
            return period
        return self.get_date_range_for_period(period)

    def _apply_trade(
        self,
        wallet_id: str,
        trade: CryptoTrade,
        trade_date,
        holdings: tuple[CryptoHolding, ...],
    ) -> FinancialState:
        wallets, transactions, _ = self._ledger.add_transaction(
            self._state.wallets,
            self._state.transactions,
            wallet_id=wallet_id,
            description=trade.description,
            amount=trade.total,
            currency=trade.currency,
            type=trade.type,
            category=TransactionCategory.CRYPTO.value,
            date=trade_date,
        )
        return replace(
            self._state,
            wallets=wallets,
            transactions=transactions,
            crypto_holdings=holdings,
        )

    def _recognized_currencies(self) -> frozenset[str]:
        return self._known_currencies | self._converter.currencies()

    def _register_category(self, raw: str | None):
        """Return settings with the category registered and its canonical key."""
        settings = self._state.settings
        canonical = normalize_category(raw, settings.custom_categories)
        if is_builtin_category(canonical) or canonical in settings.custom_categories:
            return settings, canonical
        return (
            replace(
                settings,
                custom_categories=settings.custom_categories + (canonical,),
            ),
            canonical,
        )


__all__ = ["FinancialDomainStore", "StoreChange", "Listener"]
