"""
Level Logic - Pure functions for the XP progression curve.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.
"""
from bisect import bisect_right
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

BASE_XP = 100
EXPONENT = 1.5

# Title given from this level number upward (until the next milestone).
MILESTONES: Dict[int, str] = {
    1: 'Code Squire',
    5: 'Debug Apprentice',
    10: 'Syntax Warrior',
    15: 'Algorithm Knight',
    20: 'Function Paladin',
    25: 'Database Guardian',
    30: 'API Architect',
    40: 'Code Templar',
    50: 'Stack Sage',
    60: 'Framework Sorcerer',
    75: 'DevOps Warlord',
    90: 'Code Crusader',
    100: 'Grand CodeMaster',
}


def _round_half_up(value: float) -> int:
    return int(Decimal(repr(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def compute_level_cost(level: int) -> int:
    """
    XP needed to advance from ``level`` to ``level + 1``.

    Examples:
        >>> compute_level_cost(1)
        100
        >>> compute_level_cost(2)
        283
    """
    if not isinstance(level, int) or isinstance(level, bool) or level < 1:
        raise ValueError(f"level must be an integer >= 1, got {level!r}")
    return _round_half_up(BASE_XP * level ** EXPONENT)


def compute_cumulative_xp(level: int) -> int:
    """
    Total XP required to reach ``level`` from zero.

    Examples:
        >>> compute_cumulative_xp(1)
        0
        >>> compute_cumulative_xp(6)
        2821
    """
    if level <= 1:
        return 0
    return sum(compute_level_cost(i) for i in range(1, level))


def resolve_level(total_xp: int, thresholds: Sequence[int]) -> int:
    """
    Return the index into ``thresholds`` of the highest level reached.

    ``thresholds`` holds the cumulative ``exp_required`` values ordered by
    level number. Returns -1 when ``total_xp`` is below every threshold.
    """
    return bisect_right(thresholds, total_xp) - 1


def milestone_name(level: int, milestones: Optional[Dict[int, str]] = None) -> str:
    """Title of the highest milestone at or below ``level``."""
    milestones = MILESTONES if milestones is None else milestones
    reached = [number for number in milestones if number <= level]
    if not reached:
        return f'Level {level}'
    return milestones[max(reached)]


def build_level_table(max_level: int, milestones: Optional[Dict[int, str]] = None) -> List[dict]:
    """
    Rows for levels 1..max_level, ready to persist as the Level table.

    Each row: {'level_number', 'name', 'description', 'exp_required'}.
    """
    if max_level < 1:
        raise ValueError(f"max_level must be >= 1, got {max_level!r}")
    milestones = MILESTONES if milestones is None else milestones

    rows = []
    cumulative = 0
    for level in range(1, max_level + 1):
        if level > 1:
            cumulative += compute_level_cost(level - 1)
        name = milestone_name(level, milestones)
        if level in milestones:
            description = f'Unlocked the {name} title.'
        else:
            description = f'{name}, level {level}.'
        rows.append({
            'level_number': level,
            'name': name,
            'description': description,
            'exp_required': cumulative,
        })
    return rows


def is_monotonic(previous: Optional[int], value: int, following: Optional[int]) -> bool:
    """Check that ``value`` fits between its neighbours' thresholds."""
    if previous is not None and value < previous:
        return False
    if following is not None and value > following:
        return False
    return True
