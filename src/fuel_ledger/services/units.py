"""Gram and slice conversions."""

import math

from fuel_ledger.domain.ledger import MacroType

GRAMS_PER_SLICE = {
    MacroType.CARBS: 26,
    MacroType.PROTEIN: 25,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def grams_to_slices(macro: MacroType, grams: int) -> int:
    """Convert a gram total to a slice count.

    Any positive amount counts as at least one slice.
    """
    if grams <= 0:
        return 0
    return max(1, round_half_up(grams / GRAMS_PER_SLICE[macro]))


def slices_to_grams(macro: MacroType, slices: int) -> int:
    """Convert a slice count back to nominal grams."""
    if slices <= 0:
        return 0
    return slices * GRAMS_PER_SLICE[macro]


def parse_amount(value: object) -> int:
    """Parse a user-typed amount, treating anything invalid as zero."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0
    else:
        return 0
    if math.isnan(number) or math.isinf(number) or number <= 0:
        return 0
    return round_half_up(number)
