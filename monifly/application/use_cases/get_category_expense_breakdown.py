"""Use case to group period expenses by category."""

from decimal import Decimal

from monifly.application.use_cases.fx_utils import transaction_display_amount
from monifly.domain.constants import CHART_COLORS
from monifly.domain.models import (
    DistributionSlice,
    FinancialState,
    PeriodRange,
    TransactionType,
)
from monifly.domain.services.fx import CurrencyConverter, quantize_money
from monifly.infrastructure.logging.logger import get_app_logger


class GetCategoryExpenseBreakdownUseCase:
    """Compute chart-ready expense totals per category."""

    def __init__(self, converter: CurrencyConverter, logger=None) -> None:
        self._converter = converter
        self._logger = logger or get_app_logger()

    def execute(
        self,
        state: FinancialState,
        period: PeriodRange,
        transaction_type: TransactionType = TransactionType.EXPENSE,
    ) -> list[DistributionSlice]:
        """Return category totals in the display currency.

        Args:
            state: Snapshot to aggregate.
            period: Resolved filter period.
            transaction_type: Side of the ledger to group, expenses by default.

        Returns:
            list[DistributionSlice]: Slices sorted by value, largest first.
        """
        currency = state.settings.primary_display_currency
        totals: dict[str, Decimal] = {}
        skipped = 0
        for transaction in state.transactions:
            if transaction.type is not transaction_type:
                continue
            if not period.contains(transaction.date):
                continue
            amount = transaction_display_amount(
                self._converter,
                transaction,
                currency,
            )
            if amount is None:
                skipped += 1
                continue
            totals[transaction.category] = (
                totals.get(transaction.category, Decimal("0")) + amount
            )

        if skipped:
            self._logger.warning(
                f"Skipped {skipped} transactions without a rate to {currency}"
            )
        slices = [
            DistributionSlice(
                name=category,
                value=quantize_money(value, currency),
                fill=CHART_COLORS[index % len(CHART_COLORS)],
                currency=currency,
            )
            for index, (category, value) in enumerate(totals.items())
        ]
        return sorted(slices, key=lambda item: item.value, reverse=True)


__all__ = ["GetCategoryExpenseBreakdownUseCase"]
