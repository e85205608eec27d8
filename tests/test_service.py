"""Tests for LedgerService layer."""

import pytest

from splitly.exceptions import (
    ExpenseNotFoundError,
    FriendNotFoundError,
    InvalidExpenseError,
    PayerRemovalError,
    SplitMismatchError,
    UnknownParticipantError,
)
from splitly.models import YOU_ID
from splitly.service import LedgerService, parse_names


def friend_ids(service) -> dict[str, str]:
    """Map friend names to IDs."""
    return {friend.name: friend.id for friend in service.list_friends()}


class TestParseNames:
    """Tests for parse_names."""

    def test_splits_and_trims(self):
        """Comma-separated names are trimmed and blanks dropped."""
        assert parse_names(" Ava, Leo ,, ") == ["Ava", "Leo"]
        assert parse_names("") == []


class TestAddExpense:
    """Tests for add_expense."""

    def test_even_split_creates_friends(self, service):
        """Unknown names become friends; the owner takes the extra cent."""
        expense = service.add_expense("Dinner", "10.00", "Ava, Leo")

        ids = friend_ids(service)
        assert list(ids) == ["Ava", "Leo"]
        assert expense.participants == [YOU_ID, ids["Ava"], ids["Leo"]]
        assert expense.splits == {YOU_ID: 334, ids["Ava"]: 333, ids["Leo"]: 333}
        assert expense.paid_by == YOU_ID
        assert expense.split_type == "even"

    def test_persists_expense(self, service, mock_db):
        """Saved expenses can be read back from the database."""
        expense = service.add_expense("Dinner", "10.00", "Ava")

        assert mock_db.get_expense(expense.id) == expense

    def test_reuses_existing_friend_case_insensitively(self, service):
        """Names match existing friends regardless of case."""
        service.add_expense("Lunch", "5.00", "Ava")
        expense = service.add_expense("Coffee", "3.00", "AVA, ava")

        ids = friend_ids(service)
        assert list(ids) == ["Ava"]
        assert expense.participants == [YOU_ID, ids["Ava"]]

    @pytest.mark.parametrize(
        "description,amount,names,message",
        [
            ("  ", "10.00", "Ava", "Description is required"),
            ("Dinner", "0", "Ava", "positive"),
            ("Dinner", "-5", "Ava", "positive"),
            ("Dinner", "abc", "Ava", "positive"),
            ("Dinner", "10.00", " , ", "At least one friend"),
        ],
    )
    def test_rejects_invalid_input(self, service, description, amount, names, message):
        """Invalid expenses are rejected without creating friends."""
        with pytest.raises(InvalidExpenseError, match=message):
            service.add_expense(description, amount, names)

        assert service.list_friends() == []
        assert service.list_expenses() == []

    def test_paid_by_friend(self, service):
        """The payer can be referred to by name."""
        expense = service.add_expense("Taxi", "12.00", "Ava", paid_by="ava")

        assert expense.paid_by == friend_ids(service)["Ava"]

    def test_paid_by_owner_name(self, service):
        """The owner's display name resolves to the reserved identifier."""
        expense = service.add_expense("Taxi", "12.00", "Ava", paid_by="You")

        assert expense.paid_by == YOU_ID

    def test_paid_by_friend_outside_expense(self, service):
        """An existing friend can pay for an expense they don't share."""
        service.add_expense("Lunch", "5.00", "Leo")
        expense = service.add_expense("Gift", "20.00", "Ava", paid_by="Leo")

        ids = friend_ids(service)
        assert expense.paid_by == ids["Leo"]
        assert ids["Leo"] not in expense.splits

    @pytest.mark.parametrize("names", ["Ava, You", "you", "YOU, Leo"])
    def test_rejects_friend_named_like_owner(self, service, names):
        """Friend names that resolve to the owner are rejected."""
        with pytest.raises(InvalidExpenseError, match="refers to you"):
            service.add_expense(
                "Dinner",
                "10.00",
                names,
                split_type="custom",
                custom_shares={"you": "2.00", "Ava": "8.00"},
            )

        assert service.list_friends() == []
        assert service.list_expenses() == []

    def test_rejects_friend_named_like_custom_owner_name(self, mock_settings, mock_db):
        """The configured owner name is reserved as well."""
        settings = mock_settings.model_copy(update={"owner_name": "Sam"})
        service = LedgerService(settings, mock_db)

        with pytest.raises(InvalidExpenseError, match="refers to you"):
            service.add_expense("Dinner", "10.00", "Ava, sam")

        expense = service.add_expense("Dinner", "10.00", "Ava", paid_by="Sam")
        assert expense.paid_by == YOU_ID

    def test_unknown_payer(self, service):
        """A payer who is neither the owner nor a friend is rejected."""
        with pytest.raises(UnknownParticipantError, match="Zed"):
            service.add_expense("Taxi", "12.00", "Ava", paid_by="Zed")

    def test_custom_split(self, service):
        """Custom shares are stored when they add up."""
        expense = service.add_expense(
            "Groceries",
            "30.00",
            "Ava, Leo",
            split_type="custom",
            custom_shares={"you": "10", "ava": "20.00"},
        )

        ids = friend_ids(service)
        assert expense.split_type == "custom"
        assert expense.splits == {YOU_ID: 1000, ids["Ava"]: 2000, ids["Leo"]: 0}

    def test_custom_split_mismatch(self, service):
        """Shares that don't add up are rejected before anything is saved."""
        with pytest.raises(SplitMismatchError, match="add up exactly") as exc_info:
            service.add_expense(
                "Groceries",
                "30.00",
                "Ava",
                split_type="custom",
                custom_shares={"you": "10.00", "Ava": "19.99"},
            )

        assert exc_info.value.total_cents == 3000
        assert exc_info.value.shares_cents == 2999
        assert service.list_friends() == []

    def test_custom_share_for_outsider(self, service):
        """Shares for someone outside the expense are rejected."""
        service.add_expense("Lunch", "5.00", "Leo")

        with pytest.raises(UnknownParticipantError, match="Leo"):
            service.add_expense(
                "Groceries",
                "30.00",
                "Ava",
                split_type="custom",
                custom_shares={"you": "10.00", "Ava": "10.00", "Leo": "10.00"},
            )


class TestEditExpense:
    """Tests for edit_expense and edit_form."""

    def test_keeps_identity(self, service):
        """Editing replaces fields but keeps ID and creation time."""
        original = service.add_expense("Dinner", "10.00", "Ava")

        edited = service.edit_expense(original.id, "Late dinner", "20.00", "Ava, Leo")

        assert edited.id == original.id
        assert edited.created_at == original.created_at
        assert edited.amount_cents == 2000
        assert len(edited.participants) == 3
        assert [expense.id for expense in service.list_expenses()] == [original.id]

    def test_missing_expense(self, service):
        """Editing an unknown expense raises."""
        with pytest.raises(ExpenseNotFoundError):
            service.edit_expense("nope", "Dinner", "10.00", "Ava")

    def test_edit_form(self, service):
        """The form is pre-filled with two-decimal text and names."""
        expense = service.add_expense("Dinner", "10.00", "Ava, Leo", paid_by="Ava")

        form = service.edit_form(expense.id)

        assert form.description == "Dinner"
        assert form.amount == "10.00"
        assert form.paid_by == "Ava"
        assert form.friend_names == "Ava, Leo"
        assert form.custom_shares == {"you": "3.34", "Ava": "3.33", "Leo": "3.33"}

    def test_edit_form_round_trip(self, service):
        """Saving an unchanged form reproduces the same split."""
        expense = service.add_expense(
            "Groceries",
            "30.00",
            "Ava",
            split_type="custom",
            custom_shares={"you": "12.50", "Ava": "17.50"},
        )
        form = service.edit_form(expense.id)

        edited = service.edit_expense(
            expense.id,
            description=form.description,
            amount=form.amount,
            friend_names=form.friend_names,
            paid_by=form.paid_by,
            split_type=form.split_type,
            custom_shares=form.custom_shares,
        )

        assert edited.splits == expense.splits
        assert edited.paid_by == expense.paid_by


class TestDeleteExpense:
    """Tests for delete_expense."""

    def test_delete(self, service):
        """Deleted expenses disappear."""
        expense = service.add_expense("Dinner", "10.00", "Ava")

        service.delete_expense(expense.id)

        assert service.list_expenses() == []

    def test_delete_missing(self, service):
        """Deleting an unknown expense raises."""
        with pytest.raises(ExpenseNotFoundError):
            service.delete_expense("nope")


class TestBalances:
    """Tests for friend and group balances."""

    def test_friend_balances(self, service):
        """Balances are relative to the owner."""
        service.add_expense("Dinner", "30.00", "Ava, Leo")
        service.add_expense("Taxi", "10.00", "Ava", paid_by="Ava")

        ids = friend_ids(service)
        balances = service.friend_balances()

        assert balances == {ids["Ava"]: 500, ids["Leo"]: 1000}

    def test_group_balances_and_settlements(self, service):
        """Group balances conserve money and settle to zero."""
        service.add_expense("Dinner", "30.00", "Ava, Leo")
        service.add_expense("Taxi", "10.00", "Ava", paid_by="Ava")

        ids = friend_ids(service)
        balances = service.group_balances()

        assert balances == {YOU_ID: 1500, ids["Ava"]: -500, ids["Leo"]: -1000}
        assert [(t.from_id, t.to_id, t.amount_cents) for t in service.settlements()] == [
            (ids["Ava"], YOU_ID, 500),
            (ids["Leo"], YOU_ID, 1000),
        ]

    def test_describe_friend_balance(self, service):
        """Balances read from the owner's point of view."""
        assert service.describe_friend_balance(0) == "Settled"
        assert service.describe_friend_balance(1000) == "Owes you ₹10.00"
        assert service.describe_friend_balance(-500) == "You owe ₹5.00"

    def test_describe_expense_line(self, service):
        """Each expense is described relative to one friend."""
        mine = service.add_expense("Dinner", "30.00", "Ava, Leo")
        theirs = service.add_expense("Taxi", "10.00", "Ava", paid_by="Ava")
        ids = friend_ids(service)

        assert service.describe_expense_line(mine, ids["Ava"]) == "Paid by you · ₹10.00 owed"
        assert (
            service.describe_expense_line(theirs, ids["Ava"])
            == "Paid by Ava · you owe ₹5.00"
        )
        assert service.describe_expense_line(theirs, ids["Leo"]) == "Shared expense"

    def test_expenses_with(self, service):
        """Only expenses involving the friend are listed, newest first."""
        first = service.add_expense("Dinner", "30.00", "Ava, Leo")
        service.add_expense("Taxi", "10.00", "Leo")
        third = service.add_expense("Coffee", "4.00", "Ava")

        result = service.expenses_with(friend_ids(service)["Ava"])

        assert [expense.id for expense in result] == [third.id, first.id]


class TestRemoveFriend:
    """Tests for remove_friend."""

    def test_reassigns_orphaned_shares(self, service):
        """The removed friend's share spreads over remaining participants."""
        expense = service.add_expense("Dinner", "9.00", "Ava, Leo")
        ids = friend_ids(service)

        service.remove_friend("leo")

        updated = service.get_expense(expense.id)
        assert updated.participants == [YOU_ID, ids["Ava"]]
        assert updated.splits == {YOU_ID: 450, ids["Ava"]: 450}
        assert list(friend_ids(service)) == ["Ava"]
        assert sum(service.group_balances().values()) == 0

    def test_refuses_to_remove_payer(self, service):
        """A friend who paid for an expense must stay."""
        expense = service.add_expense("Taxi", "10.00", "Ava", paid_by="Ava")

        with pytest.raises(PayerRemovalError, match=expense.id):
            service.remove_friend("Ava")

        assert list(friend_ids(service)) == ["Ava"]

    def test_unknown_friend(self, service):
        """Removing an unknown friend raises."""
        with pytest.raises(FriendNotFoundError):
            service.remove_friend("Zed")
