"""Wallet ledger: wallets and the transactions applied to them.

The ledger never holds collections itself. Every method receives the current
tuples and returns new ones, so the store can swap a whole snapshot at once.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from decimal import Decimal
from logging import Logger
from typing import Any

from monifly.domain.constants import CHART_COLORS, KNOWN_CURRENCIES
from monifly.domain.errors import (
    TransactionNotFound,
    ValidationError,
    WalletNotFound,
)
from monifly.domain.models import (
    BalanceDiscrepancy,
    DistributionSlice,
    Transaction,
    TransactionType,
    Wallet,
)
from monifly.domain.services.fx import CurrencyConverter, quantize_money
from monifly.domain.services.normalization import normalize_currency_code
from monifly.domain.services.validation import (
    parse_enum,
    parse_iso_date,
    require_amount,
    require_currency,
    require_signed_amount,
    require_text,
)
from monifly.infrastructure.logging.logger import get_app_logger
from monifly.utils.ids import generate_id


WALLET_PATCH_FIELDS = frozenset(
    {"name", "currency", "color", "icon", "balance", "is_default"}
)
TRANSACTION_PATCH_FIELDS = frozenset(
    {
        "description",
        "amount",
        "currency",
        "category",
        "date",
        "type",
        "wallet_id",
        "notes",
    }
)


def sort_transactions(
    transactions: Iterable[Transaction],
) -> tuple[Transaction, ...]:
    """Return transactions newest first, keeping insertion order for ties."""
    return tuple(sorted(transactions, key=lambda tx: tx.date, reverse=True))


class WalletLedger:
    """Own wallet balances and keep them in step with transactions."""

    def __init__(
        self,
        converter: CurrencyConverter,
        logger: Logger | None = None,
        known_currencies: Iterable[str] = KNOWN_CURRENCIES,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        """Initialize the ledger.

        Args:
            converter: Converter used whenever currencies differ.
            logger: Optional logger compatible with logging.Logger-like API.
            known_currencies: Codes accepted in addition to the rate table's.
            id_factory: Callable producing ids from a prefix.
        """
        self._converter = converter
        self._logger = logger or get_app_logger()
        self._known_currencies = frozenset(known_currencies)
        self._id_factory = id_factory

    def recognized_currencies(self) -> frozenset[str]:
        return self._known_currencies | self._converter.currencies()

    # ------------------------------------------------------------------
    # Wallet commands
    # ------------------------------------------------------------------
    def add_wallet(
        self,
        wallets: tuple[Wallet, ...],
        name: str,
        currency: str,
        initial_balance=Decimal("0"),
        icon: str | None = None,
        color: str | None = None,
        *,
        is_default: bool = False,
        wallet_id: str | None = None,
    ) -> tuple[tuple[Wallet, ...], Wallet]:
        """Create a wallet holding ``initial_balance``.

        Returns:
            tuple: Updated wallets and the created wallet.
        """
        clean_name = require_text(name, "name")
        code = require_currency(currency, self.recognized_currencies())
        balance = require_signed_amount(initial_balance, "initial_balance")
        new_id = wallet_id or self._id_factory("wallet")
        if self.get_wallet_by_id(wallets, new_id) is not None:
            raise ValidationError(f"Wallet id already exists: {new_id}")

        wallet = Wallet(
            id=new_id,
            name=clean_name,
            currency=code,
            balance=balance,
            opening_balance=balance,
            is_default=is_default,
            icon=icon,
            color=color,
        )
        existing = self._clear_default(wallets) if is_default else wallets
        return existing + (wallet,), wallet

    def apply_transaction(
        self,
        wallets: tuple[Wallet, ...],
        wallet_id: str,
        signed_delta: Decimal,
    ) -> tuple[Wallet, ...]:
        """Add a signed delta to one wallet's balance."""
        self.require_wallet(wallets, wallet_id)
        return tuple(
            replace(wallet, balance=wallet.balance + signed_delta)
            if wallet.id == wallet_id
            else wallet
            for wallet in wallets
        )

    def update_wallet(
        self,
        wallets: tuple[Wallet, ...],
        wallet_id: str,
        patch: Mapping[str, Any],
    ) -> tuple[tuple[Wallet, ...], Wallet]:
        """Apply a partial update to a wallet.

        A new ``balance`` is recorded as a manual adjustment: the opening
        balance shifts by the same delta. A new ``currency`` only relabels
        the wallet; stored amounts are not converted.
        """
        unknown = set(patch) - WALLET_PATCH_FIELDS
        if unknown:
            raise ValidationError(
                f"Unsupported wallet fields: {', '.join(sorted(unknown))}"
            )
        wallet = self.require_wallet(wallets, wallet_id)
        changes: dict[str, Any] = {}
        if "name" in patch:
            changes["name"] = require_text(patch["name"], "name")
        if "currency" in patch:
            code = require_currency(
                patch["currency"],
                self.recognized_currencies(),
            )
            if code != wallet.currency:
                self._logger.warning(
                    f"Wallet {wallet_id} relabelled from {wallet.currency} "
                    f"to {code}; balance and history are not converted"
                )
            changes["currency"] = code
        if "balance" in patch:
            balance = require_signed_amount(patch["balance"], "balance")
            changes["balance"] = balance
            changes["opening_balance"] = (
                wallet.opening_balance + balance - wallet.balance
            )
        if "icon" in patch:
            changes["icon"] = patch["icon"]
        if "color" in patch:
            changes["color"] = patch["color"]
        if "is_default" in patch:
            changes["is_default"] = bool(patch["is_default"])

        updated = replace(wallet, **changes)
        source = (
            self._clear_default(wallets) if changes.get("is_default") else wallets
        )
        return (
            tuple(updated if item.id == wallet_id else item for item in source),
            updated,
        )

    def delete_wallet(
        self,
        wallets: tuple[Wallet, ...],
        wallet_id: str,
    ) -> tuple[Wallet, ...]:
        """Remove a wallet. Its transactions are left untouched."""
        self.require_wallet(wallets, wallet_id)
        return tuple(wallet for wallet in wallets if wallet.id != wallet_id)

    def reorder_wallets(
        self,
        wallets: tuple[Wallet, ...],
        ordered_ids: Iterable[str],
    ) -> tuple[Wallet, ...]:
        """Return wallets in the given display order.

        Raises:
            ValidationError: If ``ordered_ids`` is not a permutation of the
                current wallet ids.
        """
        order = list(ordered_ids)
        by_id = {wallet.id: wallet for wallet in wallets}
        if len(order) != len(set(order)) or set(order) != set(by_id):
            raise ValidationError(
                "Wallet order must list every existing wallet exactly once"
            )
        return tuple(by_id[wallet_id] for wallet_id in order)

    # ------------------------------------------------------------------
    # Transaction commands
    # ------------------------------------------------------------------
    def add_transaction(
        self,
        wallets: tuple[Wallet, ...],
        transactions: tuple[Transaction, ...],
        *,
        wallet_id: str,
        description: str,
        amount,
        currency: str,
        type,
        category: str,
        date,
        notes: str = "",
        transaction_id: str | None = None,
    ) -> tuple[tuple[Wallet, ...], tuple[Transaction, ...], Transaction]:
        """Record a transaction and apply its effect to the wallet.

        Returns:
            tuple: Updated wallets, updated transactions, new transaction.
        """
        wallet = self.require_wallet(wallets, wallet_id)
        clean_amount = require_amount(amount, "amount")
        code = require_currency(currency, self.recognized_currencies())
        tx_type = parse_enum(TransactionType, type, "type")
        new_id = transaction_id or self._id_factory("tx")
        if any(tx.id == new_id for tx in transactions):
            raise ValidationError(f"Transaction id already exists: {new_id}")

        transaction = Transaction(
            id=new_id,
            date=parse_iso_date(date),
            description=(description or "").strip(),
            amount=clean_amount,
            currency=code,
            type=tx_type,
            category=category,
            wallet_id=wallet.id,
            wallet_amount=self._wallet_amount(clean_amount, code, wallet),
            notes=notes or "",
        )
        updated_wallets = self.apply_transaction(
            wallets,
            wallet.id,
            transaction.signed_effect,
        )
        return (
            updated_wallets,
            sort_transactions(transactions + (transaction,)),
            transaction,
        )

    def update_transaction(
        self,
        wallets: tuple[Wallet, ...],
        transactions: tuple[Transaction, ...],
        transaction_id: str,
        patch: Mapping[str, Any],
    ) -> tuple[tuple[Wallet, ...], tuple[Transaction, ...], Transaction]:
        """Edit a transaction, reversing the old effect and applying the new.

        Both balance changes are computed on the same wallet tuple, so a
        caller committing the result never observes one without the other.
        """
        unknown = set(patch) - TRANSACTION_PATCH_FIELDS
        if unknown:
            raise ValidationError(
                f"Unsupported transaction fields: {', '.join(sorted(unknown))}"
            )
        original = self.require_transaction(transactions, transaction_id)
        new_wallet = self.require_wallet(
            wallets,
            patch.get("wallet_id", original.wallet_id),
        )
        amount = (
            require_amount(patch["amount"], "amount")
            if "amount" in patch
            else original.amount
        )
        currency = (
            require_currency(patch["currency"], self.recognized_currencies())
            if "currency" in patch
            else original.currency
        )
        money_changed = (
            amount != original.amount
            or currency != original.currency
            or new_wallet.id != original.wallet_id
        )
        changes: dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "wallet_id": new_wallet.id,
            "wallet_amount": (
                self._wallet_amount(amount, currency, new_wallet)
                if money_changed
                else original.wallet_amount
            ),
        }
        if "description" in patch:
            changes["description"] = (patch["description"] or "").strip()
        if "category" in patch:
            changes["category"] = patch["category"]
        if "date" in patch:
            changes["date"] = parse_iso_date(patch["date"])
        if "type" in patch:
            changes["type"] = parse_enum(TransactionType, patch["type"], "type")
        if "notes" in patch:
            changes["notes"] = patch["notes"] or ""
        updated = replace(original, **changes)

        updated_wallets = self._reverse(wallets, original)
        updated_wallets = self.apply_transaction(
            updated_wallets,
            updated.wallet_id,
            updated.signed_effect,
        )
        updated_transactions = sort_transactions(
            updated if tx.id == transaction_id else tx for tx in transactions
        )
        return updated_wallets, updated_transactions, updated

    def delete_transaction(
        self,
        wallets: tuple[Wallet, ...],
        transactions: tuple[Transaction, ...],
        transaction_id: str,
    ) -> tuple[tuple[Wallet, ...], tuple[Transaction, ...], Transaction]:
        """Remove a transaction and reverse its effect on the wallet."""
        removed = self.require_transaction(transactions, transaction_id)
        updated_wallets = self._reverse(wallets, removed)
        remaining = tuple(tx for tx in transactions if tx.id != transaction_id)
        return updated_wallets, remaining, removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @staticmethod
    def get_wallet_by_id(
        wallets: Iterable[Wallet],
        wallet_id: str,
    ) -> Wallet | None:
        for wallet in wallets:
            if wallet.id == wallet_id:
                return wallet
        return None

    def require_wallet(self, wallets: Iterable[Wallet], wallet_id: str) -> Wallet:
        wallet = self.get_wallet_by_id(wallets, wallet_id)
        if wallet is None:
            raise WalletNotFound(wallet_id)
        return wallet

    @staticmethod
    def require_transaction(
        transactions: Iterable[Transaction],
        transaction_id: str,
    ) -> Transaction:
        for transaction in transactions:
            if transaction.id == transaction_id:
                return transaction
        raise TransactionNotFound(transaction_id)

    def get_wallet_balance_distribution(
        self,
        wallets: Iterable[Wallet],
        display_currency: str,
    ) -> list[DistributionSlice]:
        """Return non-zero wallet balances in the display currency.

        Wallets without a usable rate keep their own currency and are
        flagged with ``converted=False``.

        Returns:
            list[DistributionSlice]: Slices sorted by value, largest first.
        """
        slices: list[DistributionSlice] = []
        for wallet in wallets:
            if wallet.balance == 0:
                continue
            result = self._converter.try_convert(
                wallet.balance,
                wallet.currency,
                display_currency,
            )
            slices.append(
                DistributionSlice(
                    name=wallet.name,
                    value=quantize_money(result.amount, result.currency),
                    fill=CHART_COLORS[len(slices) % len(CHART_COLORS)],
                    currency=result.currency,
                    converted=result.converted,
                )
            )
        return sorted(slices, key=lambda item: item.value, reverse=True)

    @staticmethod
    def find_balance_discrepancies(
        wallets: Iterable[Wallet],
        transactions: Iterable[Transaction],
    ) -> list[BalanceDiscrepancy]:
        """Return wallets whose balance differs from opening + effects."""
        effects: dict[str, Decimal] = {}
        for transaction in transactions:
            effects[transaction.wallet_id] = (
                effects.get(transaction.wallet_id, Decimal("0"))
                + transaction.signed_effect
            )
        discrepancies = []
        for wallet in wallets:
            expected = wallet.opening_balance + effects.get(wallet.id, Decimal("0"))
            if expected != wallet.balance:
                discrepancies.append(
                    BalanceDiscrepancy(
                        wallet_id=wallet.id,
                        expected=expected,
                        actual=wallet.balance,
                    )
                )
        return discrepancies

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _wallet_amount(
        self,
        amount: Decimal,
        currency: str,
        wallet: Wallet,
    ) -> Decimal:
        if normalize_currency_code(currency) == wallet.currency:
            return amount
        converted = self._converter.convert(amount, currency, wallet.currency)
        return quantize_money(converted, wallet.currency)

    def _reverse(
        self,
        wallets: tuple[Wallet, ...],
        transaction: Transaction,
    ) -> tuple[Wallet, ...]:
        if self.get_wallet_by_id(wallets, transaction.wallet_id) is None:
            self._logger.warning(
                f"Wallet {transaction.wallet_id} no longer exists; "
                f"nothing to reverse for transaction {transaction.id}"
            )
            return wallets
        return self.apply_transaction(
            wallets,
            transaction.wallet_id,
            -transaction.signed_effect,
        )

    @staticmethod
    def _clear_default(wallets: tuple[Wallet, ...]) -> tuple[Wallet, ...]:
        return tuple(
            replace(wallet, is_default=False) if wallet.is_default else wallet
            for wallet in wallets
        )


__all__ = [
    "WalletLedger",
    "sort_transactions",
    "WALLET_PATCH_FIELDS",
    "TRANSACTION_PATCH_FIELDS",
]
