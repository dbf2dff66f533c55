"""Use case to compute the dashboard overview for a period."""

from decimal import Decimal

from monifly.application.use_cases.fx_utils import (
    total_wallet_balance,
    transaction_display_amount,
)
from monifly.domain.models import (
    FinancialState,
    OverviewSummary,
    PeriodRange,
    TransactionType,
)
from monifly.domain.services.fx import CurrencyConverter, quantize_money
from monifly.infrastructure.logging.logger import get_app_logger


class GetOverviewUseCase:
    """Compute total balance and period income/expense totals."""

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
    ) -> OverviewSummary:
        """Return the overview in the state's display currency.

        Args:
            state: Snapshot to aggregate.
            period: Resolved filter period.

        Returns:
            OverviewSummary: Balance, income, expenses and transaction count.
        """
        currency = state.settings.primary_display_currency
        income = Decimal("0")
        expenses = Decimal("0")
        count = 0
        for transaction in state.transactions:
            if not period.contains(transaction.date):
                continue
            count += 1
            amount = transaction_display_amount(
                self._converter,
                transaction,
                currency,
            )
            if amount is None:
                continue
            if transaction.type is TransactionType.INCOME:
                income += amount
            else:
                expenses += amount

        balance = total_wallet_balance(self._converter, state.wallets, currency)
        self._logger.info(
            f"Overview computed: balance={balance}, income={income}, "
            f"expenses={expenses}, transactions={count}"
        )
        return OverviewSummary(
            total_balance=quantize_money(balance, currency),
            income=quantize_money(income, currency),
            expenses=quantize_money(expenses, currency),
            transaction_count=count,
            currency_code=currency,
        )


__all__ = ["GetOverviewUseCase"]
