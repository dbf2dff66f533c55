"""Error taxonomy raised by the finance engine.

Every error is raised synchronously to the caller. A command that raises
leaves the store snapshot exactly as it was before the call.
"""


class MoniflyError(Exception):
    """Base class for all engine errors."""


class ValidationError(MoniflyError):
    """Raised for malformed input such as empty names or negative amounts."""


class NotFound(MoniflyError):
    """Raised when an operation references an unknown id."""

    entity = "Entity"

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}")


class WalletNotFound(NotFound):
    entity = "Wallet"


class TransactionNotFound(NotFound):
    entity = "Transaction"


class BudgetEntryNotFound(NotFound):
    entity = "Budget entry"


class DebtNotFound(NotFound):
    entity = "Debt"


class CryptoHoldingNotFound(NotFound):
    entity = "Crypto holding"


class RateUnavailable(MoniflyError):
    """Raised when no rate is known for a currency pair."""

    def __init__(self, from_currency: str, to_currency: str) -> None:
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(
            f"No exchange rate available for {from_currency} -> {to_currency}"
        )


class DebtCancelled(MoniflyError):
    """Raised when a payment targets a cancelled debt."""

    def __init__(self, debt_id: str) -> None:
        self.debt_id = debt_id
        super().__init__(f"Debt {debt_id} is cancelled")


class InvariantViolation(MoniflyError):
    """Raised when a command would break a state invariant."""


__all__ = [
    "MoniflyError",
    "ValidationError",
    "NotFound",
    "WalletNotFound",
    "TransactionNotFound",
    "BudgetEntryNotFound",
    "DebtNotFound",
    "CryptoHoldingNotFound",
    "RateUnavailable",
    "DebtCancelled",
    "InvariantViolation",
]
