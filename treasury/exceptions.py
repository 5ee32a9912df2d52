from decimal import Decimal

from core.exceptions import DomainError


class InvalidMovementError(DomainError):
    pass


class InsufficientFundsError(DomainError):
    """A settlement needs more than the fund holds; nothing has been debited."""

    def __init__(self, currency: str, available: Decimal, required: Decimal):
        super().__init__(f"Insufficient {currency} funds: {available} available, {required} required.")
        self.currency = currency
        self.available = available
        self.required = required
