"""
Course Progress Logic - Pure completion arithmetic.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.
"""
from decimal import ROUND_HALF_UP, Decimal


def progress_percentage(completed: int, total: int) -> int:
    """
    Whole-number completion percentage, rounded half up.
    A course without lessons is 0% complete.

    Examples:
        >>> progress_percentage(1, 3)
        33
        >>> progress_percentage(1, 8)
        13
        >>> progress_percentage(0, 0)
        0
    """
    if total <= 0:
        return 0
    completed = max(0, min(completed, total))
    value = Decimal(completed * 100) / Decimal(total)
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def is_complete(completed: int, total: int) -> bool:
    return total > 0 and completed >= total
