"""
Payload Logic - Pure builders for notification payloads.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.
"""
from typing import Optional


def icon_url(base_url: str, icon: Optional[str]) -> Optional[str]:
    """
    Resolve a stored icon path against the public icon base URL.
    Absolute URLs are returned unchanged.

    Examples:
        >>> icon_url('/uploads/icons/', 'trophy.png')
        '/uploads/icons/trophy.png'
        >>> icon_url('/uploads/icons/', 'https://cdn.example.com/a.png')
        'https://cdn.example.com/a.png'
    """
    if not icon:
        return None
    if icon.startswith(('http://', 'https://', '/')):
        return icon
    return base_url.rstrip('/') + '/' + icon.lstrip('/')


def achievement_message(name: str) -> str:
    return f"You've earned the '{name}' achievement!"


def level_up_message(level_number: int, name: str) -> str:
    return f"You've reached level {level_number}: {name}!"


def achievement_payload(name: str, description: str, icon: Optional[str],
                        exp_reward: int, base_url: str) -> dict:
    return {
        'icon_url': icon_url(base_url, icon),
        'name': name,
        'description': description or '',
        'exp_reward': exp_reward or 0,
        'message': achievement_message(name),
    }


def level_up_payload(level_number: int, name: str, description: str, icon: Optional[str],
                     exp_required: int, base_url: str, exp_reward: int = 0) -> dict:
    """Same shape as the achievement payload plus the level fields."""
    return {
        'icon_url': icon_url(base_url, icon),
        'name': name,
        'description': description or '',
        'exp_reward': exp_reward or 0,
        'level_number': level_number,
        'exp_required': exp_required,
        'message': level_up_message(level_number, name),
    }
