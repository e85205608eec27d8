"""Splitly - Track shared expenses with friends and settle up."""

__version__ = "0.1.0"

from .allocator import reconcile_split, shares_match_total, split_even
from .config import Settings, load_settings
from .db import Database
from .ledger import (
    compute_balances,
    compute_friend_balances,
    compute_settlements,
    expenses_involving,
)
from .models import YOU_ID, Expense, Friend, Settlement
from .money import format_amount, parse_amount
from .service import LedgerService

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "YOU_ID",
    "Expense",
    "Friend",
    "Settlement",
    "parse_amount",
    "format_amount",
    "split_even",
    "reconcile_split",
    "shares_match_total",
    "compute_balances",
    "compute_settlements",
    "compute_friend_balances",
    "expenses_involving",
    "LedgerService",
]
