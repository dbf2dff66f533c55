"""Debt tracking: status machine, payment log and due-date reminders."""

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date
from decimal import Decimal
from logging import Logger

from monifly.domain.constants import DEBT_REMINDER_SOON_DAYS, KNOWN_CURRENCIES
from monifly.domain.errors import (
    DebtCancelled,
    DebtNotFound,
    InvariantViolation,
    ValidationError,
)
from monifly.domain.models import (
    Debt,
    DebtPayment,
    DebtReminder,
    DebtStatus,
    DebtType,
    ReminderState,
    TransactionType,
    Wallet,
)
from monifly.domain.policies import (
    disbursement_transaction_type,
    payment_transaction_type,
)
from monifly.domain.services.fx import CurrencyConverter, quantize_money
from monifly.domain.services.periods import PeriodResolver
from monifly.domain.services.validation import (
    parse_enum,
    parse_iso_date,
    require_amount,
    require_currency,
    require_text,
)
from monifly.infrastructure.logging.logger import get_app_logger
from monifly.utils.ids import generate_id


def derive_debt_status(
    paid_amount: Decimal,
    amount: Decimal,
    current: DebtStatus = DebtStatus.PENDING,
) -> DebtStatus:
    """Return the status implied by ``paid_amount``.

    ``cancelled`` is terminal and never produced by payment math.
    """
    if current is DebtStatus.CANCELLED:
        return DebtStatus.CANCELLED
    if paid_amount >= amount:
        return DebtStatus.PAID
    if paid_amount > 0:
        return DebtStatus.PARTIALLY_PAID
    return DebtStatus.PENDING


def sort_by_due_date(debts: Iterable[Debt]) -> list[Debt]:
    """Sort debts by due date with undated debts last."""
    return sorted(
        debts,
        key=lambda debt: (debt.due_date is None, debt.due_date or date.min),
    )


class DebtTracker:
    """Maintain debts and their append-only payment log."""

    def __init__(
        self,
        converter: CurrencyConverter,
        resolver: PeriodResolver,
        logger: Logger | None = None,
        known_currencies: Iterable[str] = KNOWN_CURRENCIES,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        self._converter = converter
        self._resolver = resolver
        self._logger = logger or get_app_logger()
        self._known_currencies = frozenset(known_currencies)
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def add_debt(
        self,
        debts: tuple[Debt, ...],
        *,
        title: str | None,
        amount,
        currency: str,
        type,
        start_date=None,
        due_date=None,
        interest_rate=Decimal("0"),
        person_name: str | None = None,
        description: str | None = None,
        initial_wallet_id: str | None = None,
        debt_id: str | None = None,
    ) -> tuple[tuple[Debt, ...], Debt]:
        """Validate and register a new pending debt.

        ``title`` falls back to ``description`` when empty.

        Returns:
            tuple: Updated debts and the created debt.
        """
        new_id = debt_id or self._id_factory("debt")
        if any(debt.id == new_id for debt in debts):
            raise ValidationError(f"Debt id already exists: {new_id}")
        start = (
            parse_iso_date(start_date, "start_date")
            if start_date is not None
            else self._resolver.today()
        )
        due = parse_iso_date(due_date, "due_date") if due_date is not None else None
        if due is not None and due < start:
            raise ValidationError("due_date must not be before start_date")

        debt = Debt(
            id=new_id,
            title=require_text(title or description, "title"),
            amount=require_amount(amount, "amount", allow_zero=False),
            currency=require_currency(currency, self._recognized_currencies()),
            type=parse_enum(DebtType, type, "type"),
            start_date=start,
            due_date=due,
            interest_rate=require_amount(interest_rate, "interest_rate"),
            person_name=(person_name or "").strip() or None,
            description=(description or "").strip() or None,
            initial_wallet_id=initial_wallet_id,
        )
        return debts + (debt,), debt

    def delete_debt(
        self,
        debts: tuple[Debt, ...],
        payments: tuple[DebtPayment, ...],
        debt_id: str,
    ) -> tuple[tuple[Debt, ...], tuple[DebtPayment, ...]]:
        """Remove a debt together with its payment log.

        Wallet transactions created by past payments are kept.
        """
        self.require_debt(debts, debt_id)
        return (
            tuple(debt for debt in debts if debt.id != debt_id),
            tuple(payment for payment in payments if payment.debt_id != debt_id),
        )

    def cancel_debt(
        self,
        debts: tuple[Debt, ...],
        debt_id: str,
    ) -> tuple[tuple[Debt, ...], Debt]:
        """Move a debt to the terminal ``cancelled`` state.

        Raises:
            DebtCancelled: If the debt is already cancelled.
            ValidationError: If the debt is already paid.
        """
        debt = self.require_debt(debts, debt_id)
        if debt.status is DebtStatus.CANCELLED:
            raise DebtCancelled(debt_id)
        if debt.status is DebtStatus.PAID:
            raise ValidationError(f"Debt {debt_id} is already paid")
        cancelled = replace(debt, status=DebtStatus.CANCELLED)
        return self._replace(debts, cancelled), cancelled

    def record_payment(
        self,
        debts: tuple[Debt, ...],
        payments: tuple[DebtPayment, ...],
        debt_id: str,
        *,
        amount,
        currency: str,
        payment_date=None,
        wallet_id: str | None = None,
        transaction_id: str | None = None,
        allow_overpayment: bool = False,
        note: str = "",
        payment_id: str | None = None,
    ) -> tuple[tuple[Debt, ...], tuple[DebtPayment, ...], DebtPayment]:
        """Apply a payment to a debt and append it to the payment log.

        The amount is converted into the debt's currency first. A payment
        larger than the remaining balance is rejected unless
        ``allow_overpayment`` is set; then ``paid_amount`` stops at the debt
        amount and the surplus is kept in ``overpaid_amount``.

        Args:
            debts: Current debts.
            payments: Current payment log.
            debt_id: Debt being paid.
            amount: Payment amount in ``currency``.
            currency: Payment currency.
            payment_date: Payment date, today when omitted.
            wallet_id: Wallet the matching transaction is recorded against.
            transaction_id: Id of that wallet transaction.
            allow_overpayment: Accept amounts above the remaining balance.
            note: Free-text note.
            payment_id: Explicit id for the payment entry.

        Returns:
            tuple: Updated debts, updated payment log, the new payment.

        Raises:
            DebtCancelled: If the debt is cancelled.
            InvariantViolation: If the payment overshoots without consent.
            RateUnavailable: If the payment currency cannot be converted.
        """
        debt = self.require_debt(debts, debt_id)
        if debt.status is DebtStatus.CANCELLED:
            raise DebtCancelled(debt_id)
        paid = require_amount(amount, "amount", allow_zero=False)
        code = require_currency(currency, self._recognized_currencies())
        debt_amount = quantize_money(
            self._converter.convert(paid, code, debt.currency),
            debt.currency,
        )
        if debt_amount > debt.remaining_amount and not allow_overpayment:
            raise InvariantViolation(
                f"Payment of {debt_amount} {debt.currency} exceeds the "
                f"remaining {debt.remaining_amount} on debt {debt_id}"
            )

        applied = min(debt_amount, debt.remaining_amount)
        surplus = debt_amount - applied
        if surplus:
            self._logger.warning(
                f"Overpayment of {surplus} {debt.currency} accepted on debt "
                f"{debt_id}"
            )
        paid_amount = debt.paid_amount + applied
        updated = replace(
            debt,
            paid_amount=paid_amount,
            overpaid_amount=debt.overpaid_amount + surplus,
            status=derive_debt_status(paid_amount, debt.amount, debt.status),
        )
        payment = DebtPayment(
            id=payment_id or self._id_factory("payment"),
            debt_id=debt_id,
            amount=paid,
            currency=code,
            date=(
                parse_iso_date(payment_date, "payment_date")
                if payment_date is not None
                else self._resolver.today()
            ),
            debt_amount=debt_amount,
            wallet_id=wallet_id,
            transaction_id=transaction_id,
            note=note or "",
        )
        return self._replace(debts, updated), payments + (payment,), payment

    # ------------------------------------------------------------------
    # Wallet side effects
    # ------------------------------------------------------------------
    @staticmethod
    def payment_transaction_type(debt: Debt) -> TransactionType:
        return payment_transaction_type(debt.type)

    @staticmethod
    def disbursement_transaction_type(debt: Debt) -> TransactionType:
        return disbursement_transaction_type(debt.type)

    @staticmethod
    def describe_payment(debt: Debt, note: str = "") -> str:
        person = debt.person_name or "unknown"
        if debt.type.is_receivable:
            text = f"Debt repayment from {person} ({debt.title})"
        else:
            text = f"Debt payment to {person} ({debt.title})"
        return f"{text} - {note}" if note else text

    @staticmethod
    def describe_disbursement(debt: Debt) -> str:
        person = debt.person_name or "unknown"
        if debt.type.is_receivable:
            return f"Loan issued to {person} ({debt.title})"
        return f"Loan received from {person} ({debt.title})"

    def check_disbursement_funds(self, debt: Debt, wallet: Wallet) -> None:
        """Reject lending more than the wallet holds.

        Raises:
            ValidationError: If the wallet balance cannot cover the loan.
        """
        if self.disbursement_transaction_type(debt) is not TransactionType.EXPENSE:
            return
        needed = self._converter.convert(debt.amount, debt.currency, wallet.currency)
        if wallet.balance < needed:
            raise ValidationError(
                f"Insufficient funds in wallet {wallet.name} to lend "
                f"{debt.amount} {debt.currency}"
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @staticmethod
    def require_debt(debts: Iterable[Debt], debt_id: str) -> Debt:
        for debt in debts:
            if debt.id == debt_id:
                return debt
        raise DebtNotFound(debt_id)

    @staticmethod
    def get_debts_i_owe(
        debts: Iterable[Debt],
        include_cancelled: bool = False,
    ) -> list[Debt]:
        return sort_by_due_date(
            debt
            for debt in debts
            if not debt.type.is_receivable
            and (include_cancelled or debt.status is not DebtStatus.CANCELLED)
        )

    @staticmethod
    def get_debts_owed_to_me(
        debts: Iterable[Debt],
        include_cancelled: bool = False,
    ) -> list[Debt]:
        return sort_by_due_date(
            debt
            for debt in debts
            if debt.type.is_receivable
            and (include_cancelled or debt.status is not DebtStatus.CANCELLED)
        )

    @staticmethod
    def get_payments_for_debt(
        payments: Iterable[DebtPayment],
        debt_id: str,
    ) -> list[DebtPayment]:
        """Return a debt's payments in chronological order."""
        return sorted(
            (payment for payment in payments if payment.debt_id == debt_id),
            key=lambda payment: payment.date,
        )

    def get_due_reminder(
        self,
        debt: Debt,
        today: date | None = None,
    ) -> DebtReminder:
        """Derive the due-date reminder for one debt."""
        ref = today or self._resolver.today()
        days_until_due = (
            (debt.due_date - ref).days if debt.due_date is not None else None
        )
        if debt.status is DebtStatus.PAID:
            state = ReminderState.SETTLED
        elif days_until_due is None:
            state = ReminderState.NO_DUE_DATE
        elif days_until_due < 0:
            state = ReminderState.OVERDUE
        elif days_until_due == 0:
            state = ReminderState.DUE_TODAY
        elif days_until_due <= DEBT_REMINDER_SOON_DAYS:
            state = ReminderState.DUE_SOON
        else:
            state = ReminderState.UPCOMING
        return DebtReminder(
            debt_id=debt.id,
            title=debt.title,
            due_date=debt.due_date,
            days_until_due=days_until_due,
            state=state,
        )

    def get_due_reminders(
        self,
        debts: Iterable[Debt],
        today: date | None = None,
    ) -> list[DebtReminder]:
        """Return reminders for every open debt, soonest due first."""
        return [
            self.get_due_reminder(debt, today)
            for debt in sort_by_due_date(debts)
            if debt.status is not DebtStatus.CANCELLED
        ]

    def total_outstanding(
        self,
        debts: Iterable[Debt],
        display_currency: str,
    ) -> Decimal:
        """Sum remaining amounts of open debts in the display currency."""
        total = Decimal("0")
        for debt in debts:
            if debt.status is DebtStatus.CANCELLED:
                continue
            result = self._converter.try_convert(
                debt.remaining_amount,
                debt.currency,
                display_currency,
            )
            if result.converted:
                total += result.amount
        return quantize_money(total, display_currency)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _recognized_currencies(self) -> frozenset[str]:
        return self._known_currencies | self._converter.currencies()

    @staticmethod
    def _replace(debts: tuple[Debt, ...], updated: Debt) -> tuple[Debt, ...]:
        return tuple(updated if debt.id == updated.id else debt for debt in debts)


__all__ = ["DebtTracker", "derive_debt_status", "sort_by_due_date"]
