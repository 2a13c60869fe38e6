"""
Slug Logic - Pure helpers for URL slugs.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.
"""
import re
import unicodedata
from typing import Container

_NON_WORD = re.compile(r'[^a-z0-9]+')


def slugify(text: str, max_length: int = 200) -> str:
    """
    Examples:
        >>> slugify('Python Basics: Loops & Lists!')
        'python-basics-loops-lists'
    """
    ascii_text = unicodedata.normalize('NFKD', text or '').encode('ascii', 'ignore').decode('ascii')
    slug = _NON_WORD.sub('-', ascii_text.lower()).strip('-')
    return slug[:max_length].rstrip('-') or 'test'


def unique_slug(base: str, taken: Container[str]) -> str:
    """Append -2, -3, ... until the slug is free."""
    if base not in taken:
        return base
    suffix = 2
    while f'{base}-{suffix}' in taken:
        suffix += 1
    return f'{base}-{suffix}'
