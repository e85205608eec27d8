"""Pydantic domain models for Splitly."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

# Reserved participant identifier for the owner of the ledger
YOU_ID = "you"

SplitType = Literal["even", "custom"]

# ============================================================================
# Ledger Models
# ============================================================================


class Friend(BaseModel):
    """A person the owner shares expenses with."""

    id: str
    name: str
    created_at: datetime = Field(default_factory=datetime.now)


class Expense(BaseModel):
    """A shared expense.

    The balance engine only reads ``amount_cents``, ``paid_by`` and ``splits``.
    The remaining fields belong to the application shell.

    Invariants:
    - ``sum(splits.values()) == amount_cents``
    - ``paid_by`` need not be a key of ``splits``
    - ``splits`` keys follow the order of ``participants``
    """

    id: str
    description: str = ""
    amount_cents: int
    paid_by: str
    participants: list[str] = Field(default_factory=list)
    split_type: SplitType = "even"
    splits: dict[str, int] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)


class Settlement(BaseModel):
    """A suggested transfer: ``from_id`` pays ``to_id`` the given amount."""

    from_id: str
    to_id: str
    amount_cents: int = Field(gt=0)


# ============================================================================
# Form Models
# ============================================================================


class ExpenseForm(BaseModel):
    """Pre-filled values for editing an existing expense.

    Amounts are plain two-decimal text, custom shares are keyed by display
    name, mirroring what a user would type when adding the expense.
    """

    description: str
    amount: str
    paid_by: str
    friend_names: str
    split_type: SplitType = "even"
    custom_shares: dict[str, str] = Field(default_factory=dict)
