"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re
from typing import Any

CENT = Decimal("0.01")

# Largest magnitude a NUMERIC(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


def to_money(value: Any) -> Decimal:
    """Convert a number (int, float, str or Decimal) to a two-place Decimal.

    Floats are converted through ``str`` so ``4.5`` becomes ``Decimal("4.50")``
    rather than its binary expansion.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Could not parse amount {value!r}")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Could not parse amount {value!r}: {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount {value!r}: not a finite number")
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount {value!r}: too large") from None


def parse_amount(amount_str: str) -> Decimal:
    """Parse a user-entered amount string into a non-negative Decimal magnitude.

    Handles:
    - "123.45"
    - "$123.45"
    - "1,234.56"

    Signs are rejected; direction is given by the transaction type.

    Raises:
        ValueError: If amount string cannot be parsed or is negative
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()
    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    amount = to_money(amount_str)
    if amount < 0:
        raise ValueError(
            f"Amount '{amount_str}' is negative; use the transaction type for direction"
        )
    return amount
