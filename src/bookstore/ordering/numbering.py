"""Human-readable order numbers: ``ORD`` + YYMMDD + daily sequence.

The sequence is zero-padded to three digits and widens past 999 instead of
wrapping. Numbers of one day sort correctly as strings up to the 999th order;
the 1000th and later are one character longer, so compare those with
``sequence_of`` rather than lexically.

Uniqueness is finally enforced by the unique constraint on
``Order.order_number``, not here.
"""

import re
from datetime import date

PREFIX = "ORD"
_SEQUENCE_WIDTH = 3
_PATTERN = re.compile(rf"^{PREFIX}(\d{{6}})(\d{{{_SEQUENCE_WIDTH},}})$")


def day_prefix(day: date) -> str:
    return f"{PREFIX}{day:%y%m%d}"


def format_order_number(day: date, sequence: int) -> str:
    if sequence < 1:
        raise ValueError(f"Order sequence must be positive, got {sequence}")
    return f"{day_prefix(day)}{sequence:0{_SEQUENCE_WIDTH}d}"


def sequence_of(order_number: str) -> int | None:
    """Daily sequence encoded in ``order_number``, or None if it is not one of ours."""
    match = _PATTERN.match(order_number or "")
    return int(match.group(2)) if match else None


def next_order_number(day: date, existing_numbers) -> str:
    """Next number for ``day`` given the numbers already issued that day.

    Numbers from other days or in a foreign format are ignored.
    """
    prefix = day_prefix(day)
    sequences = [
        sequence
        for number in existing_numbers
        if number and number.startswith(prefix) and (sequence := sequence_of(number)) is not None
    ]
    return format_order_number(day, max(sequences, default=0) + 1)
