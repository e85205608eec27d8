"""Service layer that composes the store and the balance engine.

This is the caller of the pure core: it resolves friend names, enforces the
validation rules the core leaves to callers (non-empty description, positive
amount, custom shares adding up) and persists the resulting splits.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime

from .allocator import reconcile_split, shares_match_total, split_even
from .config import Settings
from .db import Database
from .exceptions import (
    ExpenseNotFoundError,
    FriendNotFoundError,
    InvalidExpenseError,
    PayerRemovalError,
    SplitMismatchError,
    UnknownParticipantError,
)
from .ledger import (
    compute_balances,
    compute_friend_balances,
    compute_settlements,
    expenses_involving,
)
from .models import YOU_ID, Expense, ExpenseForm, Friend, Settlement, SplitType
from .money import cents_to_text, format_amount, parse_amount

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Generate a short random identifier."""
    return uuid.uuid4().hex[:8]


def parse_names(text: str) -> list[str]:
    """Split comma-separated names, dropping blanks."""
    return [name.strip() for name in text.split(",") if name.strip()]


class LedgerService:
    """Service for recording shared expenses and settling up with friends."""

    def __init__(self, settings: Settings, database: Database):
        """Initialize the ledger service."""
        self.settings = settings
        self.db = database

    # ========================================================================
    # Formatting
    # ========================================================================

    def format(self, cents: int) -> str:
        """Format cents with the configured currency symbol and grouping."""
        return format_amount(
            cents,
            symbol=self.settings.currency_symbol,
            grouping=self.settings.digit_grouping,
        )

    def participant_name(self, participant_id: str) -> str:
        """Display name for a participant identifier."""
        if participant_id == YOU_ID:
            return self.settings.owner_name
        friend = self.db.get_friend(participant_id)
        return friend.name if friend else participant_id

    def describe_friend_balance(self, balance: int) -> str:
        """Describe a friend balance from the owner's point of view."""
        if balance == 0:
            return "Settled"
        if balance > 0:
            return f"Owes you {self.format(balance)}"
        return f"You owe {self.format(abs(balance))}"

    def describe_expense_line(self, expense: Expense, friend_id: str) -> str:
        """Describe what an expense means between the owner and one friend."""
        if expense.paid_by == YOU_ID:
            owed = self.format(expense.splits.get(friend_id, 0))
            return f"Paid by you · {owed} owed"
        if expense.paid_by == friend_id:
            return (
                f"Paid by {self.participant_name(friend_id)} · "
                f"you owe {self.format(expense.splits.get(YOU_ID, 0))}"
            )
        return "Shared expense"

    # ========================================================================
    # Friends
    # ========================================================================

    def list_friends(self) -> list[Friend]:
        """Get all friends in the order they were added."""
        return self.db.get_friends()

    def find_friend(self, friend_ref: str) -> Friend:
        """
        Find a friend by ID or case-insensitive name.

        Raises:
            FriendNotFoundError: If nothing matches
        """
        wanted = friend_ref.strip().lower()
        for friend in self.db.get_friends():
            if friend.id == friend_ref or friend.name.lower() == wanted:
                return friend
        raise FriendNotFoundError(friend_ref)

    def remove_friend(self, friend_ref: str) -> Friend:
        """
        Remove a friend, reassigning their shares to remaining participants.

        Each affected expense keeps its total; the orphaned share is spread
        over the remaining participants in order by ``reconcile_split``.

        Raises:
            FriendNotFoundError: If the friend doesn't exist
            PayerRemovalError: If the friend paid for any recorded expense
        """
        friend = self.find_friend(friend_ref)
        expenses = self.db.get_expenses()

        paid = [expense.id for expense in expenses if expense.paid_by == friend.id]
        if paid:
            raise PayerRemovalError(friend.name, paid)

        updated = []
        for expense in expenses:
            involved = friend.id in expense.participants or friend.id in expense.splits
            if not involved:
                continue

            participants = [pid for pid in expense.participants if pid != friend.id]
            remaining = {
                pid: cents for pid, cents in expense.splits.items() if pid != friend.id
            }
            expense.participants = participants
            expense.splits = reconcile_split(
                expense.amount_cents, participants, remaining
            )
            updated.append(expense)

        self.db.remove_friend(friend.id, updated)

        logger.info(
            f"Removed friend {friend.name} ({friend.id}), "
            f"reassigned shares on {len(updated)} expenses"
        )

        return friend

    # ========================================================================
    # Expenses
    # ========================================================================

    def list_expenses(self) -> list[Expense]:
        """Get all expenses, newest first."""
        return self.db.get_expenses()

    def get_expense(self, expense_id: str) -> Expense:
        """
        Get an expense by ID.

        Raises:
            ExpenseNotFoundError: If the expense doesn't exist
        """
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise ExpenseNotFoundError(expense_id)
        return expense

    def add_expense(
        self,
        description: str,
        amount: str,
        friend_names: str,
        paid_by: str = YOU_ID,
        split_type: SplitType = "even",
        custom_shares: Mapping[str, str] | None = None,
    ) -> Expense:
        """
        Record a new expense shared between the owner and the named friends.

        Args:
            description: What the expense was for
            amount: Total as decimal text, e.g. ``"120.00"``
            friend_names: Comma-separated friend names; unknown names
                become new friends
            paid_by: Name or ID of the payer (``"you"`` for the owner)
            split_type: ``"even"`` or ``"custom"``
            custom_shares: Decimal text per participant name, for custom splits

        Returns:
            The saved expense

        Raises:
            InvalidExpenseError: Blank description, non-positive amount or no friends
            UnknownParticipantError: Payer or share name not recognized
            SplitMismatchError: Custom shares don't add up to the total
        """
        expense = self._build_expense(
            expense_id=new_id(),
            description=description,
            amount=amount,
            friend_names=friend_names,
            paid_by=paid_by,
            split_type=split_type,
            custom_shares=custom_shares,
        )
        logger.info(
            f"Added expense {expense.id} '{expense.description}' "
            f"({expense.amount_cents} cents, {len(expense.participants)} participants)"
        )
        return expense

    def edit_expense(
        self,
        expense_id: str,
        description: str,
        amount: str,
        friend_names: str,
        paid_by: str = YOU_ID,
        split_type: SplitType = "even",
        custom_shares: Mapping[str, str] | None = None,
    ) -> Expense:
        """
        Replace an expense's fields, keeping its ID and creation time.

        Takes the same arguments as ``add_expense``.

        Raises:
            ExpenseNotFoundError: If the expense doesn't exist
        """
        existing = self.get_expense(expense_id)
        expense = self._build_expense(
            expense_id=existing.id,
            description=description,
            amount=amount,
            friend_names=friend_names,
            paid_by=paid_by,
            split_type=split_type,
            custom_shares=custom_shares,
            created_at=existing.created_at,
        )
        logger.info(f"Edited expense {expense.id} '{expense.description}'")
        return expense

    def edit_form(self, expense_id: str) -> ExpenseForm:
        """Pre-filled form values for editing an existing expense."""
        expense = self.get_expense(expense_id)

        friend_names = [
            self.participant_name(pid) for pid in expense.participants if pid != YOU_ID
        ]
        shares = {
            self._form_name(pid): cents_to_text(cents)
            for pid, cents in expense.splits.items()
        }

        return ExpenseForm(
            description=expense.description,
            amount=cents_to_text(expense.amount_cents),
            paid_by=self._form_name(expense.paid_by),
            friend_names=", ".join(friend_names),
            split_type=expense.split_type,
            custom_shares=shares,
        )

    def delete_expense(self, expense_id: str):
        """
        Delete an expense.

        Raises:
            ExpenseNotFoundError: If the expense doesn't exist
        """
        if not self.db.delete_expense(expense_id):
            raise ExpenseNotFoundError(expense_id)
        logger.info(f"Deleted expense {expense_id}")

    def expenses_with(self, friend_id: str) -> list[Expense]:
        """Expenses shared with or paid by a friend, newest first."""
        return expenses_involving(friend_id, self.db.get_expenses())

    # ========================================================================
    # Balances
    # ========================================================================

    def friend_balances(self) -> dict[str, int]:
        """Each friend's balance with the owner (positive = friend owes you)."""
        friend_ids = [friend.id for friend in self.db.get_friends()]
        return compute_friend_balances(YOU_ID, friend_ids, self.db.get_expenses())

    def group_balances(self) -> dict[str, int]:
        """Everyone's net balance across all expenses, owner first."""
        participants = [YOU_ID] + [friend.id for friend in self.db.get_friends()]
        return compute_balances(participants, self.db.get_expenses())

    def settlements(self) -> list[Settlement]:
        """Suggested transfers that would settle all group balances."""
        return compute_settlements(self.group_balances())

    # ========================================================================
    # Internals
    # ========================================================================

    def _build_expense(
        self,
        expense_id: str,
        description: str,
        amount: str,
        friend_names: str,
        paid_by: str,
        split_type: SplitType,
        custom_shares: Mapping[str, str] | None,
        created_at: datetime | None = None,
    ) -> Expense:
        """Validate inputs, compute the split and persist the expense."""
        description = description.strip()
        amount_cents = parse_amount(amount)
        names = parse_names(friend_names)

        if not description:
            raise InvalidExpenseError("Description is required")
        if amount_cents <= 0:
            raise InvalidExpenseError(
                f"Amount must be a positive number, got {amount!r}"
            )
        if not names:
            raise InvalidExpenseError("At least one friend is required")

        # The owner's names always resolve to the owner, never to a friend
        reserved = {YOU_ID, self.settings.owner_name.lower()}
        clashing = [name for name in names if name.lower() in reserved]
        if clashing:
            raise InvalidExpenseError(
                f"'{clashing[0]}' refers to you and can't be used as a friend name"
            )

        # Resolve names before saving anything, so a rejected expense
        # doesn't leave new friends behind
        friends = self.db.get_friends()
        by_name = {friend.name.lower(): friend for friend in friends}
        new_friends: list[Friend] = []
        participants = [YOU_ID]
        for name in names:
            friend = by_name.get(name.lower())
            if friend is None:
                friend = Friend(id=new_id(), name=name)
                by_name[name.lower()] = friend
                new_friends.append(friend)
            if friend.id not in participants:
                participants.append(friend.id)

        payer_id = self._resolve_participant(paid_by, by_name, friends + new_friends)

        if split_type == "custom":
            desired = {}
            for name, text in (custom_shares or {}).items():
                pid = self._resolve_participant(name, by_name, friends + new_friends)
                if pid not in participants:
                    raise UnknownParticipantError(name)
                desired[pid] = parse_amount(text)

            if not shares_match_total(amount_cents, participants, desired):
                raise SplitMismatchError(amount_cents, sum(desired.values()))
            splits = reconcile_split(amount_cents, participants, desired)
        else:
            splits = split_even(amount_cents, participants)

        for friend in new_friends:
            self.db.save_friend(friend)
            logger.info(f"Created friend {friend.name} ({friend.id})")

        expense = Expense(
            id=expense_id,
            description=description,
            amount_cents=amount_cents,
            paid_by=payer_id,
            participants=participants,
            split_type=split_type,
            splits=splits,
        )
        if created_at is not None:
            expense.created_at = created_at

        self.db.save_expense(expense)
        return expense

    def _form_name(self, participant_id: str) -> str:
        """Name a participant the way it would be typed into a form."""
        if participant_id == YOU_ID:
            return YOU_ID
        return self.participant_name(participant_id)

    def _resolve_participant(
        self, ref: str, by_name: Mapping[str, Friend], friends: list[Friend]
    ) -> str:
        """Map a name or ID to a participant identifier."""
        wanted = ref.strip().lower()
        if wanted in (YOU_ID, self.settings.owner_name.lower()):
            return YOU_ID
        if wanted in by_name:
            return by_name[wanted].id
        for friend in friends:
            if friend.id == ref:
                return friend.id
        raise UnknownParticipantError(ref)
