"""Tests for gram and slice conversions."""

import pytest

from fuel_ledger.domain.ledger import MacroType
from fuel_ledger.services.units import (
    grams_to_slices,
    parse_amount,
    round_half_up,
    slices_to_grams,
)


@pytest.mark.parametrize(
    ("macro", "grams", "slices"),
    [
        (MacroType.CARBS, 0, 0),
        (MacroType.CARBS, 1, 1),
        (MacroType.CARBS, 12, 1),
        (MacroType.CARBS, 13, 1),
        (MacroType.CARBS, 26, 1),
        (MacroType.CARBS, 39, 2),
        (MacroType.CARBS, 52, 2),
        (MacroType.CARBS, 65, 3),
        (MacroType.PROTEIN, 12, 1),
        (MacroType.PROTEIN, 37, 1),
        (MacroType.PROTEIN, 38, 2),
        (MacroType.PROTEIN, 50, 2),
    ],
)
def test_grams_to_slices(macro: MacroType, grams: int, slices: int) -> None:
    assert grams_to_slices(macro, grams) == slices


@pytest.mark.parametrize("macro", list(MacroType))
def test_slices_never_decrease_as_grams_grow(macro: MacroType) -> None:
    counts = [grams_to_slices(macro, grams) for grams in range(501)]

    assert counts[0] == 0
    assert all(count >= 1 for count in counts[1:])
    assert all(later >= earlier for earlier, later in zip(counts, counts[1:]))


def test_negative_grams_are_zero_slices() -> None:
    assert grams_to_slices(MacroType.PROTEIN, -10) == 0


def test_slices_to_grams_uses_nominal_slice_size() -> None:
    assert slices_to_grams(MacroType.CARBS, 3) == 78
    assert slices_to_grams(MacroType.PROTEIN, 2) == 50
    assert slices_to_grams(MacroType.PROTEIN, -1) == 0


def test_round_half_up_rounds_halves_upward() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("30", 30),
        (" 12.5 ", 13),
        (7.4, 7),
        (40, 40),
        ("", 0),
        ("abc", 0),
        ("-5", 0),
        (-3, 0),
        (float("nan"), 0),
        (float("inf"), 0),
        (None, 0),
        (True, 0),
    ],
)
def test_parse_amount(raw: object, expected: int) -> None:
    assert parse_amount(raw) == expected
