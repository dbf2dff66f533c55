"""Budget projection: planned entries compared with actual transactions."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from logging import Logger
from typing import Any

from monifly.domain.constants import (
    CASHFLOW_FORECAST_HORIZONS,
    CASHFLOW_HISTORY_MONTHS,
    CHART_COLORS,
    KNOWN_CURRENCIES,
)
from monifly.domain.errors import BudgetEntryNotFound, ValidationError
from monifly.domain.models import (
    BudgetEntry,
    BudgetFrequency,
    BudgetProgress,
    CashflowForecastPoint,
    DistributionSlice,
    PeriodRange,
    Transaction,
    TransactionType,
    Wallet,
)
from monifly.domain.services.fx import CurrencyConverter, quantize_money
from monifly.domain.services.normalization import categories_match
from monifly.domain.services.periods import (
    PeriodResolver,
    add_months,
    clamp_day,
    month_start,
)
from monifly.domain.services.validation import (
    parse_enum,
    parse_iso_date,
    require_amount,
    require_currency,
    require_day_of_month,
    require_text,
)
from monifly.infrastructure.logging.logger import get_app_logger
from monifly.utils.ids import generate_id


BUDGET_PATCH_FIELDS = frozenset(
    {
        "description",
        "amount",
        "currency",
        "type",
        "category",
        "frequency",
        "start_date",
        "day_of_month",
        "limit",
        "is_active",
        "wallet_id",
    }
)


class BudgetProjector:
    """Validate budget entries and project them against real activity."""

    def __init__(
        self,
        converter: CurrencyConverter,
        resolver: PeriodResolver,
        logger: Logger | None = None,
        known_currencies: Iterable[str] = KNOWN_CURRENCIES,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        """Initialize the projector.

        Args:
            converter: Converter used for every cross-currency amount.
            resolver: Period resolver supplying "today" for open ranges.
            logger: Optional logger compatible with logging.Logger-like API.
            known_currencies: Codes accepted in addition to the rate table's.
            id_factory: Callable producing ids from a prefix.
        """
        self._converter = converter
        self._resolver = resolver
        self._logger = logger or get_app_logger()
        self._known_currencies = frozenset(known_currencies)
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def add_budget_entry(
        self,
        entries: tuple[BudgetEntry, ...],
        *,
        description: str,
        amount,
        currency: str,
        type,
        category: str,
        frequency,
        start_date,
        day_of_month: int | None = None,
        limit=None,
        is_active: bool = True,
        wallet_id: str | None = None,
        entry_id: str | None = None,
    ) -> tuple[tuple[BudgetEntry, ...], BudgetEntry]:
        """Validate and append a budget entry.

        Returns:
            tuple: Updated entries and the created entry.
        """
        new_id = entry_id or self._id_factory("budget")
        if any(entry.id == new_id for entry in entries):
            raise ValidationError(f"Budget entry id already exists: {new_id}")
        entry = self._validated(
            BudgetEntry(
                id=new_id,
                description=description,
                amount=amount,
                currency=currency,
                type=type,
                category=category,
                frequency=frequency,
                start_date=start_date,
                day_of_month=day_of_month,
                limit=limit,
                is_active=bool(is_active),
                wallet_id=wallet_id,
            )
        )
        return entries + (entry,), entry

    def update_budget_entry(
        self,
        entries: tuple[BudgetEntry, ...],
        entry_id: str,
        patch: Mapping[str, Any],
    ) -> tuple[tuple[BudgetEntry, ...], BudgetEntry]:
        """Apply a partial update and revalidate the whole entry.

        Switching an entry to ``once`` drops its ``day_of_month`` and
        ``limit``, and switching it to ``income`` drops its ``limit``, unless
        the patch sets those fields itself.
        """
        unknown = set(patch) - BUDGET_PATCH_FIELDS
        if unknown:
            raise ValidationError(
                f"Unsupported budget entry fields: {', '.join(sorted(unknown))}"
            )
        current = self.require_entry(entries, entry_id)
        changes = dict(patch)
        if "frequency" in changes:
            frequency = parse_enum(BudgetFrequency, changes["frequency"], "frequency")
            if frequency is BudgetFrequency.ONCE:
                changes.setdefault("day_of_month", None)
                changes.setdefault("limit", None)
        if "type" in changes:
            entry_type = parse_enum(TransactionType, changes["type"], "type")
            if entry_type is TransactionType.INCOME:
                changes.setdefault("limit", None)
        updated = self._validated(replace(current, **changes))
        return (
            tuple(updated if entry.id == entry_id else entry for entry in entries),
            updated,
        )

    def delete_budget_entry(
        self,
        entries: tuple[BudgetEntry, ...],
        entry_id: str,
    ) -> tuple[BudgetEntry, ...]:
        """Hard-delete an entry. Deactivation goes through ``is_active``."""
        self.require_entry(entries, entry_id)
        return tuple(entry for entry in entries if entry.id != entry_id)

    @staticmethod
    def require_entry(
        entries: Iterable[BudgetEntry],
        entry_id: str,
    ) -> BudgetEntry:
        for entry in entries:
            if entry.id == entry_id:
                return entry
        raise BudgetEntryNotFound(entry_id)

    # ------------------------------------------------------------------
    # Occurrences
    # ------------------------------------------------------------------
    def occurrences_in_range(
        self,
        entry: BudgetEntry,
        period: PeriodRange,
    ) -> list[date]:
        """Return the dates on which an entry falls inside ``period``.

        An open-ended period stops at today, so ``allTime`` counts the
        occurrences that have already happened.
        """
        if entry.frequency is BudgetFrequency.ONCE:
            return [entry.start_date] if period.contains(entry.start_date) else []

        end = period.end or self._resolver.today() + timedelta(days=1)
        first = entry.start_date
        if period.start is not None and period.start > first:
            first = period.start
        occurrences = []
        current = month_start(first)
        while current < end:
            occurrence = clamp_day(current.year, current.month, entry.day_of_month)
            if (
                entry.start_date <= occurrence < end
                and period.contains(occurrence)
            ):
                occurrences.append(occurrence)
            current = add_months(current, 1)
        return occurrences

    def next_due_date(
        self,
        entry: BudgetEntry,
        reference: date | None = None,
    ) -> date | None:
        """Return the first occurrence on or after ``reference``."""
        if not entry.is_active:
            return None
        ref = reference or self._resolver.today()
        if entry.frequency is BudgetFrequency.ONCE:
            return entry.start_date if entry.start_date >= ref else None
        current = month_start(max(ref, entry.start_date))
        while True:
            occurrence = clamp_day(current.year, current.month, entry.day_of_month)
            if occurrence >= ref and occurrence >= entry.start_date:
                return occurrence
            current = add_months(current, 1)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_actual_spending_for_budget(
        self,
        entry: BudgetEntry,
        transactions: Iterable[Transaction],
        period: PeriodRange,
    ) -> Decimal:
        """Sum matching transactions in the entry's currency.

        A transaction matches when its category and type equal the entry's,
        its wallet matches a wallet-scoped entry and its date lies in
        ``period``. Nothing is counted when the entry has no occurrence in
        the period.

        Raises:
            RateUnavailable: If a matching transaction cannot be converted.
        """
        if not self.occurrences_in_range(entry, period):
            return Decimal("0")
        total = Decimal("0")
        for transaction in transactions:
            if not self._matches(entry, transaction, period):
                continue
            total += self._converter.convert(
                transaction.amount,
                transaction.currency,
                entry.currency,
            )
        return quantize_money(total, entry.currency)

    def planned_amount(self, entry: BudgetEntry, period: PeriodRange) -> Decimal:
        """Return the baseline multiplied by the occurrences in ``period``."""
        return entry.baseline * len(self.occurrences_in_range(entry, period))

    def get_deviation(
        self,
        entry: BudgetEntry,
        transactions: Iterable[Transaction],
        period: PeriodRange,
    ) -> Decimal:
        """Return actual minus planned; positive means overspend."""
        actual = self.get_actual_spending_for_budget(entry, transactions, period)
        return actual - self.planned_amount(entry, period)

    def get_budget_progress(
        self,
        entries: Iterable[BudgetEntry],
        transactions: Iterable[Transaction],
        period: PeriodRange,
    ) -> list[BudgetProgress]:
        """Return planned versus actual for every active entry."""
        history = tuple(transactions)
        progress = []
        for entry in entries:
            if not entry.is_active:
                continue
            planned = self.planned_amount(entry, period)
            actual = self.get_actual_spending_for_budget(entry, history, period)
            progress.append(
                BudgetProgress(
                    entry_id=entry.id,
                    description=entry.description,
                    category=entry.category,
                    currency=entry.currency,
                    planned=planned,
                    actual=actual,
                    deviation=actual - planned,
                )
            )
        return progress

    def get_budget_distribution(
        self,
        entries: Iterable[BudgetEntry],
        display_currency: str,
        entry_type: TransactionType = TransactionType.EXPENSE,
    ) -> list[DistributionSlice]:
        """Group active planned amounts by category in the display currency.

        Returns:
            list[DistributionSlice]: Slices sorted by value, largest first.
        """
        totals: dict[tuple[str, str, bool], Decimal] = {}
        for entry in entries:
            if not entry.is_active or entry.type is not entry_type:
                continue
            result = self._converter.try_convert(
                entry.baseline,
                entry.currency,
                display_currency,
            )
            key = (entry.category, result.currency, result.converted)
            totals[key] = totals.get(key, Decimal("0")) + result.amount

        slices = [
            DistributionSlice(
                name=category,
                value=quantize_money(value, currency),
                fill=CHART_COLORS[index % len(CHART_COLORS)],
                currency=currency,
                converted=converted,
            )
            for index, ((category, currency, converted), value) in enumerate(
                totals.items()
            )
        ]
        return sorted(slices, key=lambda item: item.value, reverse=True)

    def calculate_cashflow_forecast(
        self,
        months: int,
        wallets: Iterable[Wallet],
        transactions: Iterable[Transaction],
        entries: Iterable[BudgetEntry],
        display_currency: str,
    ) -> list[CashflowForecastPoint]:
        """Project the total balance over the next months.

        The current month only adds its remaining budget occurrences. Every
        later month also adds the average monthly net of the last three full
        months of transactions.

        Args:
            months: Horizon, one of 1, 3 or 6.
            wallets: Wallets supplying the starting balance.
            transactions: History used for the monthly average.
            entries: Budget entries supplying upcoming occurrences.
            display_currency: Currency of every projected figure.

        Returns:
            list[CashflowForecastPoint]: One point per forecast month.
        """
        if months not in CASHFLOW_FORECAST_HORIZONS:
            raise ValidationError(
                f"Forecast horizon must be one of {CASHFLOW_FORECAST_HORIZONS}"
            )
        today = self._resolver.today()
        history = tuple(transactions)
        active = [entry for entry in entries if entry.is_active]

        balance = Decimal("0")
        for wallet in wallets:
            balance += self._display_amount(
                wallet.balance,
                wallet.currency,
                display_currency,
            )
        average_net = self._average_monthly_net(history, today, display_currency)

        points = []
        current_month = month_start(today)
        for offset in range(months):
            start = add_months(current_month, offset)
            window = PeriodRange(start=max(start, today), end=add_months(start, 1))
            history_net = Decimal("0") if offset == 0 else average_net

            budget_income = Decimal("0")
            budget_expense = Decimal("0")
            for entry in active:
                count = len(self.occurrences_in_range(entry, window))
                if not count:
                    continue
                amount = self._display_amount(
                    entry.amount * count,
                    entry.currency,
                    display_currency,
                )
                if entry.type is TransactionType.INCOME:
                    budget_income += amount
                else:
                    budget_expense += amount

            net_change = history_net + budget_income - budget_expense
            balance += net_change
            points.append(
                CashflowForecastPoint(
                    period_start=start,
                    projected_balance=quantize_money(balance, display_currency),
                    income_transactions=max(history_net, Decimal("0")),
                    expense_transactions=max(-history_net, Decimal("0")),
                    budget_income=quantize_money(budget_income, display_currency),
                    budget_expense=quantize_money(budget_expense, display_currency),
                    net_change=quantize_money(net_change, display_currency),
                    currency_code=display_currency,
                )
            )
        return points

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _average_monthly_net(
        self,
        transactions: tuple[Transaction, ...],
        today: date,
        display_currency: str,
    ) -> Decimal:
        start = add_months(month_start(today), -CASHFLOW_HISTORY_MONTHS)
        window = PeriodRange(start=start, end=month_start(today))
        net = Decimal("0")
        for transaction in transactions:
            if not window.contains(transaction.date):
                continue
            net += transaction.type.signed(
                self._display_amount(
                    transaction.amount,
                    transaction.currency,
                    display_currency,
                )
            )
        return quantize_money(net / CASHFLOW_HISTORY_MONTHS, display_currency)

    def _display_amount(
        self,
        amount: Decimal,
        currency: str,
        display_currency: str,
    ) -> Decimal:
        result = self._converter.try_convert(amount, currency, display_currency)
        return result.amount if result.converted else Decimal("0")

    @staticmethod
    def _matches(
        entry: BudgetEntry,
        transaction: Transaction,
        period: PeriodRange,
    ) -> bool:
        if transaction.type is not entry.type:
            return False
        if not categories_match(transaction.category, entry.category):
            return False
        if entry.wallet_id is not None and transaction.wallet_id != entry.wallet_id:
            return False
        return period.contains(transaction.date)

    def _validated(self, entry: BudgetEntry) -> BudgetEntry:
        frequency = parse_enum(BudgetFrequency, entry.frequency, "frequency")
        entry_type = parse_enum(TransactionType, entry.type, "type")
        day_of_month = entry.day_of_month
        if frequency is BudgetFrequency.MONTHLY:
            day_of_month = require_day_of_month(day_of_month)
        elif day_of_month is not None:
            raise ValidationError("day_of_month is only allowed for monthly entries")

        limit = entry.limit
        if limit is not None:
            if entry_type is not TransactionType.EXPENSE:
                raise ValidationError("limit is only allowed for expense entries")
            if frequency is not BudgetFrequency.MONTHLY:
                raise ValidationError("limit is only allowed for monthly entries")
            limit = require_amount(limit, "limit")

        return replace(
            entry,
            description=require_text(entry.description, "description"),
            amount=require_amount(entry.amount, "amount"),
            currency=require_currency(
                entry.currency,
                self._known_currencies | self._converter.currencies(),
            ),
            type=entry_type,
            category=entry.category or "other",
            frequency=frequency,
            start_date=parse_iso_date(entry.start_date, "start_date"),
            day_of_month=day_of_month,
            limit=limit,
            is_active=bool(entry.is_active),
        )


__all__ = ["BudgetProjector", "BUDGET_PATCH_FIELDS"]
