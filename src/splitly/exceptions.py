"""Custom exceptions for Splitly."""


class SplitlyError(Exception):
    """Base exception for all Splitly errors."""

    pass


class ConfigurationError(SplitlyError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidExpenseError(SplitlyError):
    """Raised when an expense is missing a description, amount or friends."""

    pass


class SplitMismatchError(SplitlyError):
    """Raised when custom shares don't add up to the expense total."""

    def __init__(self, total_cents: int, shares_cents: int, message: str | None = None):
        self.total_cents = total_cents
        self.shares_cents = shares_cents
        super().__init__(
            message or "Custom splits must add up exactly to the total amount."
        )


class UnknownParticipantError(SplitlyError):
    """Raised when a payer or custom share refers to someone outside the expense."""

    def __init__(self, participant: str, message: str | None = None):
        self.participant = participant
        super().__init__(message or f"'{participant}' is not part of this expense")


class ExpenseNotFoundError(SplitlyError):
    """Raised when no expense exists with the given ID."""

    def __init__(self, expense_id: str):
        self.expense_id = expense_id
        super().__init__(f"No expense with ID {expense_id}")


class FriendNotFoundError(SplitlyError):
    """Raised when no friend matches the given name or ID."""

    def __init__(self, friend_ref: str):
        self.friend_ref = friend_ref
        super().__init__(f"No friend named or identified by '{friend_ref}'")


class PayerRemovalError(SplitlyError):
    """Raised when removing a friend who still paid for recorded expenses."""

    def __init__(self, friend_name: str, expense_ids: list[str]):
        self.friend_name = friend_name
        self.expense_ids = expense_ids
        super().__init__(
            f"{friend_name} paid for {len(expense_ids)} expense(s); "
            f"edit or remove those first: {', '.join(expense_ids)}"
        )
