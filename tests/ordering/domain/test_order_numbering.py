"""Tests for human-readable order numbers."""

from datetime import date

import pytest

from bookstore.ordering.numbering import format_order_number, next_order_number, sequence_of

DAY = date(2026, 10, 18)


def test_first_number_of_day():
    assert next_order_number(DAY, []) == "ORD261018001"


def test_follows_highest_sequence():
    existing = ["ORD261018001", "ORD261018007", "ORD261018003"]
    assert next_order_number(DAY, existing) == "ORD261018008"


def test_other_days_ignored():
    assert next_order_number(DAY, ["ORD261017042", "legacy-1"]) == "ORD261018001"


def test_sequence_widens_past_999():
    assert next_order_number(DAY, ["ORD261018999"]) == "ORD2610181000"
    assert sequence_of("ORD2610181000") == 1000


def test_sequence_of_foreign_number():
    assert sequence_of("INV-2026-1") is None


def test_sequence_must_be_positive():
    with pytest.raises(ValueError):
        format_order_number(DAY, 0)


def test_widened_sequence_compared_numerically():
    existing = ["ORD261018999", "ORD2610181000"]
    assert max(existing) == "ORD261018999"
    assert next_order_number(DAY, existing) == "ORD2610181001"


def test_numbers_sort_as_strings_within_three_digits():
    numbers = [format_order_number(DAY, sequence) for sequence in (1, 42, 7, 999, 100)]
    assert sorted(numbers) == [format_order_number(DAY, sequence) for sequence in (1, 7, 42, 100, 999)]
