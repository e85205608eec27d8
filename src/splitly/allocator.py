"""Allocation of an expense total across participants.

Both entry points are pure and always return parts that sum exactly to the
total (for a non-empty participant list). Order matters: whenever cents
cannot be spread evenly, the participants earliest in the supplied order
absorb them.
"""

import logging
from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)


def split_even(total: int, participants: Sequence[str]) -> dict[str, int]:
    """
    Split a total evenly, handing remainder cents to the first participants.

    Each part is ``total // n`` or ``total // n + 1``; exactly ``total % n``
    participants, the first ones in order, get the extra cent.

    Example:
        split_even(1001, ["a", "b", "c"]) -> {"a": 334, "b": 334, "c": 333}

    Args:
        total: Amount in cents
        participants: Ordered participant identifiers

    Returns:
        Split mapping participant -> cents (empty if no participants)
    """
    if not participants:
        return {}

    base, remainder = divmod(total, len(participants))
    return {
        participant: base + (1 if index < remainder else 0)
        for index, participant in enumerate(participants)
    }


def shares_match_total(
    total: int, participants: Sequence[str], desired: Mapping[str, int]
) -> bool:
    """Check whether the desired shares of the participants add up to the total."""
    return sum(desired.get(participant, 0) for participant in participants) == total


def reconcile_split(
    total: int, participants: Sequence[str], desired: Mapping[str, int]
) -> dict[str, int]:
    """
    Nudge desired shares by whole cents until they sum exactly to the total.

    Missing shares count as zero and shares for identifiers outside
    ``participants`` are dropped. The residual is applied one cent at a time,
    cycling through participants in order from the first. This never fails:
    callers that want to reject mismatched shares must check
    ``shares_match_total`` first.

    Args:
        total: Amount in cents
        participants: Ordered participant identifiers
        desired: Desired cents per participant

    Returns:
        Split mapping participant -> cents (empty if no participants)
    """
    if not participants:
        return {}

    split = {participant: desired.get(participant, 0) for participant in participants}
    residual = total - sum(split.values())
    if residual == 0:
        return split

    # Whole cycles first, then the partial cycle from the head of the list
    step = 1 if residual > 0 else -1
    rounds, extra = divmod(abs(residual), len(participants))
    for index, participant in enumerate(participants):
        split[participant] += step * (rounds + (1 if index < extra else 0))

    logger.debug(f"Reconciled split residual of {residual} cents")

    return split
