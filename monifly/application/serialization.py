"""Conversion between ``FinancialState`` and a plain JSON-compatible document.

Decimals are written as strings and dates as ISO-8601 strings so that a
reload reproduces every amount exactly.
"""

from dataclasses import asdict
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from monifly.domain.errors import ValidationError
from monifly.domain.models import (
    BudgetEntry,
    BudgetFrequency,
    CryptoHolding,
    Debt,
    DebtPayment,
    DebtStatus,
    DebtType,
    FilterPeriod,
    FinancialState,
    Settings,
    Transaction,
    TransactionType,
    Wallet,
)
from monifly.domain.services.validation import parse_enum, parse_iso_date
from monifly.utils.decimal_utils import coerce_decimal


SNAPSHOT_VERSION = 1


def state_to_document(state: FinancialState) -> dict[str, Any]:
    """Serialize a snapshot.

    Args:
        state: Snapshot to serialize.

    Returns:
        dict[str, Any]: Document made of dicts, lists, strings and bools.
    """
    return {
        "version": SNAPSHOT_VERSION,
        "settings": _encode(asdict(state.settings)),
        "wallets": [_encode(asdict(item)) for item in state.wallets],
        "transactions": [_encode(asdict(item)) for item in state.transactions],
        "budget_entries": [_encode(asdict(item)) for item in state.budget_entries],
        "debts": [_encode(asdict(item)) for item in state.debts],
        "payments": [_encode(asdict(item)) for item in state.payments],
        "crypto_holdings": [
            _encode(asdict(item)) for item in state.crypto_holdings
        ],
    }


def state_from_document(document: dict[str, Any]) -> FinancialState:
    """Rebuild a snapshot from a document produced by ``state_to_document``.

    Raises:
        ValidationError: If the version is unsupported or a field is invalid.
    """
    version = document.get("version", SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        raise ValidationError(f"Unsupported snapshot version: {version}")
    try:
        return FinancialState(
            wallets=tuple(_wallet(row) for row in document.get("wallets", [])),
            transactions=tuple(
                _transaction(row) for row in document.get("transactions", [])
            ),
            budget_entries=tuple(
                _budget_entry(row) for row in document.get("budget_entries", [])
            ),
            debts=tuple(_debt(row) for row in document.get("debts", [])),
            payments=tuple(_payment(row) for row in document.get("payments", [])),
            crypto_holdings=tuple(
                _crypto_holding(row) for row in document.get("crypto_holdings", [])
            ),
            settings=_settings(document.get("settings") or {}),
        )
    except KeyError as exc:
        raise ValidationError(f"Snapshot document is missing {exc}") from exc


def _encode(value):
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def _optional_date(value) -> date | None:
    return parse_iso_date(value) if value else None


def _optional_decimal(value) -> Decimal | None:
    return coerce_decimal(value) if value is not None else None


def _settings(row: dict[str, Any]) -> Settings:
    defaults = Settings()
    return Settings(
        primary_display_currency=row.get(
            "primary_display_currency",
            defaults.primary_display_currency,
        ),
        filter_period=parse_enum(
            FilterPeriod,
            row.get("filter_period", defaults.filter_period),
            "filter_period",
        ),
        custom_period_start=_optional_date(row.get("custom_period_start")),
        custom_period_end=_optional_date(row.get("custom_period_end")),
        custom_categories=tuple(row.get("custom_categories") or ()),
    )


def _wallet(row: dict[str, Any]) -> Wallet:
    balance = coerce_decimal(row["balance"])
    return Wallet(
        id=row["id"],
        name=row["name"],
        currency=row["currency"],
        balance=balance,
        opening_balance=coerce_decimal(row.get("opening_balance", balance)),
        is_default=bool(row.get("is_default", False)),
        icon=row.get("icon"),
        color=row.get("color"),
    )


def _transaction(row: dict[str, Any]) -> Transaction:
    amount = coerce_decimal(row["amount"])
    return Transaction(
        id=row["id"],
        date=parse_iso_date(row["date"]),
        description=row.get("description", ""),
        amount=amount,
        currency=row["currency"],
        type=parse_enum(TransactionType, row["type"], "type"),
        category=row.get("category", "other"),
        wallet_id=row["wallet_id"],
        wallet_amount=coerce_decimal(row.get("wallet_amount", amount)),
        notes=row.get("notes", ""),
    )


def _budget_entry(row: dict[str, Any]) -> BudgetEntry:
    return BudgetEntry(
        id=row["id"],
        description=row["description"],
        amount=coerce_decimal(row["amount"]),
        currency=row["currency"],
        type=parse_enum(TransactionType, row["type"], "type"),
        category=row.get("category", "other"),
        frequency=parse_enum(BudgetFrequency, row["frequency"], "frequency"),
        start_date=parse_iso_date(row["start_date"], "start_date"),
        day_of_month=row.get("day_of_month"),
        limit=_optional_decimal(row.get("limit")),
        is_active=bool(row.get("is_active", True)),
        wallet_id=row.get("wallet_id"),
    )


def _debt(row: dict[str, Any]) -> Debt:
    return Debt(
        id=row["id"],
        title=row["title"],
        amount=coerce_decimal(row["amount"]),
        currency=row["currency"],
        type=parse_enum(DebtType, row["type"], "type"),
        start_date=parse_iso_date(row["start_date"], "start_date"),
        due_date=_optional_date(row.get("due_date")),
        status=parse_enum(DebtStatus, row.get("status", "pending"), "status"),
        paid_amount=coerce_decimal(row.get("paid_amount")),
        overpaid_amount=coerce_decimal(row.get("overpaid_amount")),
        interest_rate=coerce_decimal(row.get("interest_rate")),
        person_name=row.get("person_name"),
        description=row.get("description"),
        initial_wallet_id=row.get("initial_wallet_id"),
    )


def _payment(row: dict[str, Any]) -> DebtPayment:
    amount = coerce_decimal(row["amount"])
    return DebtPayment(
        id=row["id"],
        debt_id=row["debt_id"],
        amount=amount,
        currency=row["currency"],
        date=parse_iso_date(row["date"]),
        debt_amount=coerce_decimal(row.get("debt_amount", amount)),
        wallet_id=row.get("wallet_id"),
        transaction_id=row.get("transaction_id"),
        note=row.get("note", ""),
    )


def _crypto_holding(row: dict[str, Any]) -> CryptoHolding:
    return CryptoHolding(
        id=row["id"],
        asset=row["asset"],
        name=row.get("name") or row["asset"],
        amount=coerce_decimal(row["amount"]),
        purchase_price=coerce_decimal(row["purchase_price"]),
        purchase_currency=row["purchase_currency"],
        purchase_date=parse_iso_date(row["purchase_date"], "purchase_date"),
    )


__all__ = ["SNAPSHOT_VERSION", "state_to_document", "state_from_document"]
