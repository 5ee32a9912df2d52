from decimal import Decimal

from core.exceptions import DomainError


class BudgetExceededError(DomainError):
    """A committed amount would overrun the remaining allocation of a budget line."""

    def __init__(self, description: str, month: str, requested: Decimal, remaining: Decimal):
        super().__init__(
            f"Budget line '{description}' ({month}) has {remaining} remaining; {requested} requested."
        )
        self.description = description
        self.month = month
        self.requested = requested
        self.remaining = remaining
