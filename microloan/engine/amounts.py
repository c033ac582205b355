"""Helpers for whole-peso money arithmetic."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any


def round_half_up(numerator: int | Decimal, denominator: int | Decimal = 1) -> int:
    """Divide and round to the nearest whole unit, halves away from zero.

    ``round()`` rounds halves to even, which would make a 2 500.5 installment
    2 500 in one loan and 2 502 in another.
    """
    value = Decimal(numerator) / Decimal(denominator)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_amount(value: Any) -> Decimal:
    """Parse an amount typed by a user into a ``Decimal``.

    Accepts ints, Decimals and strings using either ``.`` or ``,`` as the
    thousands separator ("15.000", "15,000", "$ 15 000").

    Raises
    ------
    ValueError
        If the value is not a number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, (float, Decimal)):
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise ValueError(f"Invalid amount: {value!r}")
        return amount
    if not isinstance(value, str):
        raise ValueError(f"Invalid amount: {value!r}")

    cleaned = value.strip().replace("$", "").replace(" ", "")
    if cleaned.count(",") + cleaned.count(".") > 0:
        # A single separator followed by exactly three digits groups thousands
        head, _, tail = cleaned.replace(",", ".").rpartition(".")
        if len(tail) == 3 and head:
            cleaned = cleaned.replace(",", "").replace(".", "")
        else:
            cleaned = head.replace(".", "") + "." + tail
    try:
        amount = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount
