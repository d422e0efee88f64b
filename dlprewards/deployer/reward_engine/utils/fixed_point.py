"""
Integer fixed-point helpers.

Percentages are integers over PERCENTAGE_DENOMINATOR (100% = 100_000) and all
amounts are integers in the smallest asset unit, so every split is exact and
any rounding remainder is assigned explicitly rather than lost.
"""

from typing import List, Sequence

from dlprewards.deployer.utils.config import PERCENTAGE_DENOMINATOR


def mul_div(value: int, numerator: int, denominator: int) -> int:
    """Floor of value * numerator / denominator."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    return (value * numerator) // denominator


def percentage_of(amount: int, percentage: int) -> int:
    """Floor of ``amount`` scaled by a fixed-point percentage."""
    return mul_div(amount, percentage, PERCENTAGE_DENOMINATOR)


def is_valid_percentage(value) -> bool:
    """A fixed-point percentage is an int in [0, PERCENTAGE_DENOMINATOR]."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= PERCENTAGE_DENOMINATOR


def split_proportionally(total: int, weights: Sequence[int]) -> List[int]:
    """
    Split ``total`` proportionally to ``weights`` with no dust loss.

    Each part is floored; the remainder is added to the first part, so callers
    that pass weights in rank order give the remainder to the first-ranked
    entry. If every weight is zero the total is split equally.

    Returns:
        List of parts, same length as ``weights``, summing exactly to ``total``
    """
    if not weights:
        return []

    weight_sum = sum(weights)
    if weight_sum == 0:
        parts = [total // len(weights)] * len(weights)
    else:
        parts = [mul_div(total, w, weight_sum) for w in weights]

    parts[0] += total - sum(parts)
    return parts
