"""Use case to bucket period transactions into a running-balance series."""

from datetime import date, timedelta
from decimal import Decimal

from monifly.application.use_cases.fx_utils import (
    total_wallet_balance,
    transaction_display_amount,
)
from monifly.domain.models import (
    FinancialState,
    PeriodRange,
    PeriodSummaryPoint,
    TransactionType,
)
from monifly.domain.services.fx import CurrencyConverter, quantize_money
from monifly.domain.services.periods import (
    add_months,
    days_in_range,
    month_start,
    months_in_range,
)
from monifly.infrastructure.logging.logger import get_app_logger


# Periods longer than this are bucketed by month instead of by day.
DAILY_BUCKET_MAX_DAYS = 62


class GetPeriodTransactionSummaryUseCase:
    """Compute income, expenses and running balance per bucket."""

    def __init__(self, converter: CurrencyConverter, logger=None) -> None:
        """Initialize the use case.

        Args:
            converter: Converter holding the current rate table.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._converter = converter
        self._logger = logger or get_app_logger()

    def execute(
        self,
        state: FinancialState,
        period: PeriodRange,
        today: date,
    ) -> list[PeriodSummaryPoint]:
        """Return one point per day (short periods) or month (long ones).

        The series starts from the total balance at the beginning of the
        period, derived by rolling back every later transaction from the
        current balances.

        Args:
            state: Snapshot to aggregate.
            period: Resolved filter period; open bounds are closed using the
                first transaction and ``today``.
            today: Current date.

        Returns:
            list[PeriodSummaryPoint]: Chronological series.
        """
        currency = state.settings.primary_display_currency
        bounded = self._bounded(state, period, today)

        signed: list[tuple[date, TransactionType, Decimal]] = []
        for transaction in state.transactions:
            amount = transaction_display_amount(
                self._converter,
                transaction,
                currency,
            )
            if amount is not None:
                signed.append((transaction.date, transaction.type, amount))

        balance = total_wallet_balance(self._converter, state.wallets, currency)
        for day, tx_type, amount in signed:
            if day >= bounded.start:
                balance -= tx_type.signed(amount)

        monthly = (bounded.end - bounded.start).days > DAILY_BUCKET_MAX_DAYS
        starts = months_in_range(bounded) if monthly else days_in_range(bounded)

        points = []
        for bucket_start in starts:
            bucket_end = (
                add_months(bucket_start, 1)
                if monthly
                else bucket_start + timedelta(days=1)
            )
            bucket = PeriodRange(
                start=max(bucket_start, bounded.start),
                end=min(bucket_end, bounded.end),
            )
            income = Decimal("0")
            expenses = Decimal("0")
            for day, tx_type, amount in signed:
                if not bucket.contains(day):
                    continue
                if tx_type is TransactionType.INCOME:
                    income += amount
                else:
                    expenses += amount
            balance += income - expenses
            points.append(
                PeriodSummaryPoint(
                    date=bucket_start,
                    income=quantize_money(income, currency),
                    expenses=quantize_money(expenses, currency),
                    balance=quantize_money(balance, currency),
                )
            )

        self._logger.info(
            f"Period summary computed with {len(points)} "
            f"{'monthly' if monthly else 'daily'} buckets"
        )
        return points

    @staticmethod
    def _bounded(
        state: FinancialState,
        period: PeriodRange,
        today: date,
    ) -> PeriodRange:
        start = period.start
        if start is None:
            dates = [transaction.date for transaction in state.transactions]
            start = month_start(min(dates)) if dates else month_start(today)
        end = period.end or today + timedelta(days=1)
        if end <= start:
            end = start + timedelta(days=1)
        return PeriodRange(start=start, end=end)


__all__ = ["GetPeriodTransactionSummaryUseCase", "DAILY_BUCKET_MAX_DAYS"]
