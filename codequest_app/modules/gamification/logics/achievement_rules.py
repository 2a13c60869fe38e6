"""
Achievement Rules - Pure evaluation of achievement requirements.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.
"""
from typing import Dict, List, Mapping


def unmet_requirements(requirements: Mapping[str, int], stats: Mapping[str, int]) -> List[str]:
    """
    Keys of ``requirements`` whose threshold ``stats`` does not reach.
    A key missing from ``stats`` counts as 0.

    Examples:
        >>> unmet_requirements({'level': 5, 'streak': 3}, {'level': 6, 'streak': 1})
        ['streak']
    """
    return [
        key for key, threshold in (requirements or {}).items()
        if (stats.get(key) or 0) < threshold
    ]


def is_unlocked(requirements: Mapping[str, int], stats: Mapping[str, int]) -> bool:
    """An achievement without requirements is never unlocked automatically."""
    if not requirements:
        return False
    return not unmet_requirements(requirements, stats)


def progress(requirements: Mapping[str, int], stats: Mapping[str, int]) -> Dict[str, dict]:
    """Per-requirement progress: {'key': {'current': n, 'required': m}}."""
    return {
        key: {'current': stats.get(key) or 0, 'required': threshold}
        for key, threshold in (requirements or {}).items()
    }
