# Budget ledger services
from .history import ConsumptionEntry, consumption_history
from .ledger import BudgetCheck, check, commit, commit_requisition, month_for, to_primary

__all__ = [
    "BudgetCheck",
    "ConsumptionEntry",
    "check",
    "commit",
    "commit_requisition",
    "consumption_history",
    "month_for",
    "to_primary",
]
