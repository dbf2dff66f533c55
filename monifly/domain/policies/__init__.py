"""Domain policies package."""

from .debt_effects import disbursement_transaction_type, payment_transaction_type

__all__ = ["payment_transaction_type", "disbursement_transaction_type"]
