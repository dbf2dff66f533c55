"""Use case to summarize balances and recent activity as plain text.

The text is handed to an external assistant collaborator; the engine never
generates advice itself.
"""

from datetime import date, timedelta

from monifly.domain.constants import (
    FINANCIAL_CONTEXT_DAYS,
    FINANCIAL_CONTEXT_MAX_TRANSACTIONS,
)
from monifly.domain.models import FinancialState, TransactionType
from monifly.domain.services.ledger import sort_transactions
from monifly.infrastructure.logging.logger import get_app_logger


class BuildFinancialContextUseCase:
    """Render wallet balances and recent transactions."""

    def __init__(
        self,
        logger=None,
        days: int = FINANCIAL_CONTEXT_DAYS,
        max_transactions: int = FINANCIAL_CONTEXT_MAX_TRANSACTIONS,
    ) -> None:
        self._logger = logger or get_app_logger()
        self._days = days
        self._max_transactions = max_transactions

    def execute(self, state: FinancialState, today: date) -> str:
        """Return the context text.

        Args:
            state: Snapshot to describe.
            today: Reference date for the recent-activity window.

        Returns:
            str: Multi-line summary with amounts in their own currencies.
        """
        lines = ["Current balances:"]
        for wallet in state.wallets:
            lines.append(f"- {wallet.name}: {wallet.balance} {wallet.currency}")

        lines.append("")
        lines.append("Recent transactions:")
        since = today - timedelta(days=self._days)
        recent = [
            transaction
            for transaction in sort_transactions(state.transactions)
            if transaction.date >= since
        ][: self._max_transactions]
        if not recent:
            lines.append("No transactions in this period.")
        for transaction in recent:
            prefix = "+" if transaction.type is TransactionType.INCOME else "-"
            lines.append(
                f"- {transaction.description} (category: {transaction.category}): "
                f"{prefix}{transaction.amount} {transaction.currency}"
            )

        self._logger.info(
            f"Financial context built with {len(recent)} recent transactions"
        )
        return "\n".join(lines) + "\n"


__all__ = ["BuildFinancialContextUseCase"]
