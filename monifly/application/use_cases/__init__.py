"""Application use cases package."""

from .build_financial_context import BuildFinancialContextUseCase
from .get_category_expense_breakdown import GetCategoryExpenseBreakdownUseCase
from .get_overview import GetOverviewUseCase
from .get_period_transaction_summary import GetPeriodTransactionSummaryUseCase
from .load_snapshot import LoadSnapshotUseCase, SaveSnapshotUseCase

__all__ = [
    "BuildFinancialContextUseCase",
    "GetCategoryExpenseBreakdownUseCase",
    "GetOverviewUseCase",
    "GetPeriodTransactionSummaryUseCase",
    "LoadSnapshotUseCase",
    "SaveSnapshotUseCase",
]
