"""
Streak Logic - Pure functions for streak calculation.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.
"""
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union


def advance_streak(
    current_streak: int,
    longest_streak: int,
    last_activity: Optional[Union[date, datetime]],
    today: Union[date, datetime],
) -> Tuple[int, int]:
    """
    Apply one day of activity to a streak.

    Args:
        current_streak: Streak before this activity.
        longest_streak: Best streak so far.
        last_activity: Date of the previous activity (None if never active).
        today: Date of this activity.

    Returns:
        (current_streak, longest_streak) after the activity.

    Examples:
        >>> from datetime import date
        >>> advance_streak(3, 5, date(2024, 1, 2), date(2024, 1, 3))
        (4, 5)
        >>> advance_streak(3, 5, date(2024, 1, 3), date(2024, 1, 3))
        (3, 5)
        >>> advance_streak(3, 5, date(2024, 1, 1), date(2024, 1, 3))
        (1, 5)
    """
    today = _to_date(today)
    last = _to_date(last_activity)

    if last == today and current_streak > 0:
        current = current_streak
    elif last is not None and last == today - timedelta(days=1):
        current = current_streak + 1
    else:
        # First activity ever, or the chain was broken
        current = 1

    return current, max(longest_streak or 0, current)


def _to_date(value: Optional[Union[date, datetime]]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value
