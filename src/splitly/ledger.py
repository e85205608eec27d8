"""Balance accumulation and settlement over a snapshot of expenses.

Everything here is recomputed from scratch on each call; nothing is cached
or persisted. Positive balances are owed money, negative balances owe money.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence

from .models import Expense, Settlement

logger = logging.getLogger(__name__)


def compute_balances(
    participants: Sequence[str], expenses: Iterable[Expense]
) -> dict[str, int]:
    """
    Compute each participant's net balance against the group.

    The payer of each expense is credited with its total, and every split
    entry is debited from its participant. Split entries for identifiers
    outside ``participants`` are still applied and appear after the supplied
    participants, in the order they were first seen.

    Args:
        participants: Ordered participant identifiers
        expenses: Expenses to accumulate

    Returns:
        Balance map (values always sum to zero)
    """
    balances = {participant: 0 for participant in participants}

    for expense in expenses:
        payer = expense.paid_by
        balances[payer] = balances.get(payer, 0) + expense.amount_cents
        for participant, share in expense.splits.items():
            balances[participant] = balances.get(participant, 0) - share

    return balances


def compute_settlements(balances: Mapping[str, int]) -> list[Settlement]:
    """
    Reduce balances to a list of transfers that zeroes all of them.

    Greedy two-pointer match: the head debtor pays the head creditor the
    smaller of the two magnitudes, and whichever reaches zero is skipped.
    Both lists keep the balance map's order, which decides ties.

    This produces at most ``creditors + debtors - 1`` transfers but is not a
    minimum-transfer solution; finding that is a subset-partition problem.

    Args:
        balances: Balance map whose values sum to zero

    Returns:
        Ordered list of settlements
    """
    creditors = [[pid, amount] for pid, amount in balances.items() if amount > 0]
    debtors = [[pid, -amount] for pid, amount in balances.items() if amount < 0]

    settlements = []
    i, j = 0, 0
    while i < len(debtors) and j < len(creditors):
        debtor, creditor = debtors[i], creditors[j]
        amount = min(debtor[1], creditor[1])

        settlements.append(
            Settlement(from_id=debtor[0], to_id=creditor[0], amount_cents=amount)
        )

        debtor[1] -= amount
        creditor[1] -= amount
        if debtor[1] == 0:
            i += 1
        if creditor[1] == 0:
            j += 1

    logger.debug(
        f"Settled {len(creditors)} creditors and {len(debtors)} debtors "
        f"in {len(settlements)} transfers"
    )

    return settlements


def compute_friend_balances(
    owner_id: str, friend_ids: Sequence[str], expenses: Iterable[Expense]
) -> dict[str, int]:
    """
    Compute each friend's balance relative to the owner only.

    - Owner paid: the friend owes the owner their own share (+share)
    - Friend paid: the owner owes the friend the owner's share (-share)
    - Someone else paid: no effect between the two

    Args:
        owner_id: Identifier of the ledger owner
        friend_ids: Ordered friend identifiers
        expenses: Expenses to accumulate

    Returns:
        Mapping friend -> cents (positive = friend owes the owner)
    """
    balances = {friend_id: 0 for friend_id in friend_ids}

    for expense in expenses:
        if expense.paid_by == owner_id:
            for friend_id in friend_ids:
                balances[friend_id] += expense.splits.get(friend_id, 0)
        elif expense.paid_by in balances:
            balances[expense.paid_by] -= expense.splits.get(owner_id, 0)

    return balances


def expenses_involving(
    participant_id: str, expenses: Iterable[Expense]
) -> list[Expense]:
    """Expenses where the participant shares the cost or paid, in input order."""
    return [
        expense
        for expense in expenses
        if participant_id in expense.participants
        or participant_id in expense.splits
        or expense.paid_by == participant_id
    ]
