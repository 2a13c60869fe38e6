"""
SM-2 Logic - Pure functions for spaced-repetition scheduling.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.

Ease factors are integers in centiunits (250 == 2.5).
"""
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

DEFAULT_EASE_FACTOR = 250
MIN_EASE_FACTOR = 130
PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5


@dataclass(frozen=True)
class ReviewState:
    ease_factor: int = DEFAULT_EASE_FACTOR
    interval: int = 1
    repetitions: int = 0
    next_review_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None


def ease_delta(quality: int) -> int:
    """
    SM-2 ease adjustment in centiunits.

    Equals round((0.1 - (5-q) * (0.08 + (5-q) * 0.02)) * 100), computed on
    integers so no rounding is needed.

    Examples:
        >>> [ease_delta(q) for q in range(6)]
        [-80, -54, -32, -14, 0, 10]
    """
    miss = MAX_QUALITY - quality
    return 10 - miss * (8 + miss * 2)


def _scaled_interval(previous_interval: int, ease_factor: int) -> int:
    # round half up of previous_interval * ease_factor / 100
    return max(1, (previous_interval * ease_factor + 50) // 100)


def record_review(state: ReviewState, quality: int, now: datetime) -> ReviewState:
    """
    Apply one review to ``state`` and return the new state.

    quality < 3 resets the repetition count and interval; otherwise the
    interval grows 1, 6, then previous * ease. The interval uses the ease
    factor in effect before this review; the ease is then adjusted and
    floored at MIN_EASE_FACTOR.

    Raises:
        ValueError: quality outside [0, 5].
    """
    if isinstance(quality, bool) or not isinstance(quality, int) or not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise ValueError(f"quality must be an integer in [0, 5], got {quality!r}")

    if quality < PASSING_QUALITY:
        repetitions = 0
        interval = 1
    else:
        repetitions = state.repetitions + 1
        if repetitions == 1:
            interval = 1
        elif repetitions == 2:
            interval = 6
        else:
            interval = _scaled_interval(state.interval, state.ease_factor)

    ease_factor = max(MIN_EASE_FACTOR, state.ease_factor + ease_delta(quality))

    return replace(
        state,
        ease_factor=ease_factor,
        interval=interval,
        repetitions=repetitions,
        next_review_at=now + timedelta(days=interval),
        last_reviewed_at=now,
    )


def is_successful(quality: int) -> bool:
    return quality >= PASSING_QUALITY
