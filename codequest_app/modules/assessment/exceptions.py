"""Failure kinds of the test lifecycle, mapped onto the core error taxonomy."""
from codequest_app.core.error_handlers import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    OutOfRangeError,
)


class NotAssignedError(ConflictError):
    def __init__(self, test_id, student_id):
        super().__init__(
            message=f"Student {student_id} is not assigned to test {test_id}",
            code='NOT_ASSIGNED',
            status_code=403,
            details={'test_id': test_id, 'student_id': student_id},
        )


class AttemptLimitExceededError(ConflictError):
    def __init__(self, test_id, max_attempts):
        super().__init__(
            message=f"Maximum of {max_attempts} attempt(s) reached for test {test_id}",
            code='ATTEMPT_LIMIT_EXCEEDED',
            details={'test_id': test_id, 'max_attempts': max_attempts},
        )


class TestNotOpenError(ConflictError):

    def __init__(self, test_id, reason):
        super().__init__(
            message=f"Test {test_id} is not open: {reason}",
            code='TEST_NOT_OPEN',
            details={'test_id': test_id, 'reason': reason},
        )


class AttemptClosedError(ConflictError):
    def __init__(self, attempt_id, status):
        super().__init__(
            message=f"Attempt {attempt_id} is {status}",
            code='ATTEMPT_CLOSED',
            details={'attempt_id': attempt_id, 'status': status},
        )


class AttemptNotSubmittedError(ConflictError):
    def __init__(self, attempt_id, status):
        super().__init__(
            message=f"Attempt {attempt_id} has not been submitted (status: {status})",
            code='ATTEMPT_NOT_SUBMITTED',
            details={'attempt_id': attempt_id, 'status': status},
        )


class ItemNotInTestError(InvalidArgumentError):
    def __init__(self, item_id, test_id):
        super().__init__(
            message=f"Item {item_id} does not belong to test {test_id}",
            code='ITEM_NOT_IN_TEST',
            details={'item_id': item_id, 'test_id': test_id},
        )


class AlreadyClosedError(ConflictError):
    def __init__(self, test_id, status):
        super().__init__(
            message=f"Test {test_id} is already {status}",
            code='ALREADY_CLOSED',
            details={'test_id': test_id, 'status': status},
        )


class InvalidTransitionError(ConflictError):
    def __init__(self, test_id, old_status, new_status):
        super().__init__(
            message=f"Test {test_id} cannot move from {old_status} to {new_status}",
            code='INVALID_TRANSITION',
            details={'test_id': test_id, 'from': old_status, 'to': new_status},
        )


class TestLockedError(ConflictError):

    def __init__(self, test_id, status, reason=None):
        super().__init__(
            message=f"Test {test_id} can no longer be edited ({reason or f'status: {status}'})",
            code='TEST_LOCKED',
            details={'test_id': test_id, 'status': status, 'reason': reason},
        )


class ScoreOutOfRangeError(OutOfRangeError):
    def __init__(self, score, points):
        super().__init__(
            message=f"Score {score} exceeds the item's {points} point(s)",
            details={'score': score, 'points': points},
        )


__all__ = [
    'NotAssignedError',
    'AttemptLimitExceededError',
    'TestNotOpenError',
    'AttemptClosedError',
    'AttemptNotSubmittedError',
    'ItemNotInTestError',
    'AlreadyClosedError',
    'InvalidTransitionError',
    'TestLockedError',
    'ScoreOutOfRangeError',
    'NotFoundError',
]
