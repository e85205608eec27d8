"""Integer-cent money parsing and formatting.

Amounts are always ``int`` counts of cents. Decimal text is parsed with
``decimal.Decimal`` and rounded to the nearest cent using ROUND_HALF_UP
(halves round away from zero), so ``"0.005"`` becomes 1 and ``"-0.005"``
becomes -1.
"""

import logging
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Literal

logger = logging.getLogger(__name__)

Grouping = Literal["indian", "western"]

_NUMERAL = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_amount(text: str | None) -> int:
    """
    Parse decimal currency text into integer cents.

    Accepts an optional leading minus, digits and an optional single decimal
    point followed by a fraction of any length. Surrounding whitespace is
    ignored.

    Args:
        text: Raw user input, e.g. ``"12.345"``

    Returns:
        Amount in cents, or 0 when the text is not a valid number
    """
    if text is None:
        return 0

    candidate = text.strip()
    if not _NUMERAL.fullmatch(candidate):
        logger.debug(f"Unparseable amount {text!r}, using 0")
        return 0

    # Enough precision that quantizing never overflows the context
    with localcontext() as ctx:
        ctx.prec = len(candidate) + 4
        cents = Decimal(candidate) * 100
        return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_text(cents: int) -> str:
    """Render cents as plain two-decimal text, e.g. 1250 -> ``"12.50"``."""
    sign = "-" if cents < 0 else ""
    whole, fraction = divmod(abs(cents), 100)
    return f"{sign}{whole}.{fraction:02d}"


def _group_digits(digits: str, grouping: Grouping) -> str:
    """
    Insert thousands separators into a string of digits.

    Example:
        indian:  "12345678" -> "1,23,45,678"
        western: "12345678" -> "12,345,678"
    """
    if grouping == "western":
        return f"{int(digits):,}"

    head, tail = digits[:-3], digits[-3:]
    if not head:
        return tail

    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_amount(
    cents: int, symbol: str = "₹", grouping: Grouping = "indian"
) -> str:
    """
    Format cents as a currency string with exactly two fraction digits.

    Negative amounts carry a leading minus: ``-₹1,250.00``.

    Args:
        cents: Amount in cents (any int)
        symbol: Currency symbol placed before the digits
        grouping: Digit grouping style ("indian" or "western")

    Returns:
        Formatted currency string
    """
    sign = "-" if cents < 0 else ""
    whole, fraction = divmod(abs(cents), 100)
    return f"{sign}{symbol}{_group_digits(str(whole), grouping)}.{fraction:02d}"
