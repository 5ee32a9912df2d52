from .funds import get_fund_for_update, get_funds, list_movements, replenish
from .settlement import settle

__all__ = [
    "get_fund_for_update",
    "get_funds",
    "list_movements",
    "replenish",
    "settle",
]
