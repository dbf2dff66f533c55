"""CLI adapter printing a summary of the persisted finance book.

This module wires the store built by the container to stdout: overview for
the selected period, outstanding debt and crypto value, wallet
distribution, debt reminders and the balance audit.
"""

import os

from monifly.domain.errors import MoniflyError
from monifly.domain.services.periods import parse_filter_period
from monifly.infrastructure.container import build_store
from monifly.infrastructure.logging.logger import get_app_logger, get_usage_logger
from monifly.infrastructure.settings import EngineSettings


def _resolve_period(value: str | None, logger):
    """Return the period key from the environment, or None for the stored one.

    Args:
        value: Raw period key such as ``currentMonth`` or ``year``.
        logger: Logger used for warnings.
    """
    if not value:
        return None
    try:
        return parse_filter_period(value)
    except MoniflyError:
        logger.warning(f"Invalid period '{value}'. Using the stored period.")
        return None


def main() -> None:
    """Print the summary; exits with status 1 on engine errors."""
    logger = get_app_logger()
    settings = EngineSettings.from_env()
    period = _resolve_period(os.getenv("MONIFLY_SUMMARY_PERIOD"), logger)
    get_usage_logger().info(
        f"Summary requested for book {settings.book_id} (period={period})"
    )

    try:
        store = build_store(settings)
        period_range = store.get_date_range_for_period(period)
        overview = store.get_overview(period_range)
        distribution = store.get_wallet_balance_distribution()
        reminders = store.get_debt_reminders()
        outstanding = store.get_total_outstanding_debt()
        crypto_value = store.get_total_crypto_value()
        discrepancies = store.find_balance_discrepancies()
    except MoniflyError as exc:
        logger.error(f"Summary failed: {exc}")
        raise SystemExit(1) from exc

    print(
        f"Book {settings.book_id} "
        f"(period={period_range.start or '-'}..{period_range.end or '-'}, "
        f"currency={overview.currency_code})"
    )
    print(
        f"Balance: {overview.total_balance} | income: {overview.income} | "
        f"expenses: {overview.expenses} | net: {overview.net} | "
        f"transactions: {overview.transaction_count}"
    )
    print(
        f"Debts outstanding: {outstanding} | crypto holdings: {crypto_value}"
    )
    for item in distribution:
        flag = "" if item.converted else " (not converted)"
        print(f"  {item.name}: {item.value} {item.currency}{flag}")
    for reminder in reminders:
        print(
            f"  Debt {reminder.title}: {reminder.state.value} "
            f"(due {reminder.due_date or '-'})"
        )
    if discrepancies:
        for discrepancy in discrepancies:
            print(
                f"  Audit: wallet {discrepancy.wallet_id} expected "
                f"{discrepancy.expected}, found {discrepancy.actual}"
            )
    else:
        print("Audit: all wallet balances match their transactions.")


if __name__ == "__main__":  # pragma: no cover
    main()
