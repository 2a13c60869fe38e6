"""
Lifecycle Logic - Pure rules for test status and attempt timing.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.
"""
from datetime import datetime, timedelta
from typing import Iterable, Optional

STATUS_DRAFT = 'draft'
STATUS_SCHEDULED = 'scheduled'
STATUS_ACTIVE = 'active'
STATUS_CLOSED = 'closed'
STATUS_ARCHIVED = 'archived'

TEST_STATUSES = (STATUS_DRAFT, STATUS_SCHEDULED, STATUS_ACTIVE, STATUS_CLOSED, STATUS_ARCHIVED)

# draft -> scheduled -> active -> closed -> archived; scheduled may also close;
# anything may be archived
TRANSITIONS = {
    STATUS_DRAFT: {STATUS_SCHEDULED, STATUS_ARCHIVED},
    STATUS_SCHEDULED: {STATUS_ACTIVE, STATUS_CLOSED, STATUS_ARCHIVED},
    STATUS_ACTIVE: {STATUS_CLOSED, STATUS_ARCHIVED},
    STATUS_CLOSED: {STATUS_ARCHIVED},
    STATUS_ARCHIVED: set(),
}

# Students may start or continue attempts only in these states
OPEN_STATUSES = (STATUS_SCHEDULED, STATUS_ACTIVE)
# Items and settings may be edited only in these states
EDITABLE_STATUSES = (STATUS_DRAFT, STATUS_SCHEDULED)

ATTEMPT_IN_PROGRESS = 'in_progress'
ATTEMPT_SUBMITTED = 'submitted'
ATTEMPT_GRADED = 'graded'
ATTEMPT_ABANDONED = 'abandoned'

ATTEMPT_STATUSES = (ATTEMPT_IN_PROGRESS, ATTEMPT_SUBMITTED, ATTEMPT_GRADED, ATTEMPT_ABANDONED)
# Attempts counted against max_attempts
COUNTED_ATTEMPT_STATUSES = (ATTEMPT_IN_PROGRESS, ATTEMPT_SUBMITTED, ATTEMPT_GRADED)


def can_transition(old_status: str, new_status: str) -> bool:
    return new_status in TRANSITIONS.get(old_status, set())


def is_window_open(start_time: Optional[datetime], end_time: Optional[datetime], now: datetime) -> bool:
    """start_time <= now <= end_time, with a missing bound treated as unbounded."""
    if start_time is not None and now < start_time:
        return False
    if end_time is not None and now > end_time:
        return False
    return True


def closed_reason(status: str, start_time: Optional[datetime], end_time: Optional[datetime],
                  now: datetime) -> Optional[str]:
    """
    Why a test does not accept attempts right now, or None when it does.

    Both the administrative status and the time window must allow it.
    """
    if status not in OPEN_STATUSES:
        return f'status is {status}'
    if start_time is not None and now < start_time:
        return 'test has not started yet'
    if end_time is not None and now > end_time:
        return 'test has ended'
    return None


def attempt_deadline(started_at: datetime, duration_minutes: Optional[int],
                     end_time: Optional[datetime]) -> Optional[datetime]:
    """Earliest of started_at + duration and the test's end_time."""
    deadlines = []
    if duration_minutes:
        deadlines.append(started_at + timedelta(minutes=duration_minutes))
    if end_time is not None:
        deadlines.append(end_time)
    return min(deadlines) if deadlines else None


def is_attempt_expired(started_at: datetime, duration_minutes: Optional[int],
                       end_time: Optional[datetime], now: datetime) -> bool:
    deadline = attempt_deadline(started_at, duration_minutes, end_time)
    return deadline is not None and now > deadline


def time_spent_minutes(started_at: datetime, finished_at: datetime) -> int:
    """Whole minutes elapsed, never negative."""
    seconds = (finished_at - started_at).total_seconds()
    return max(0, int(seconds // 60))


def next_attempt_number(existing_numbers: Iterable[int]) -> int:
    return max(existing_numbers, default=0) + 1
