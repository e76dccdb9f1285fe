"""Money helpers shared by pricing and budgeting."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity.

    Matches the rounding the SPA applies to displayed amounts, which differs
    from Python's bankers' rounding on exact halves (``round(2.5) == 2``).
    """
    return math.floor(value + 0.5)
