"""
Attempt Service
Starting, answering, submitting and grading test attempts.
"""
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from codequest_app.core import clock
from codequest_app.core.error_handlers import ConflictError, InvalidArgumentError, NotFoundError
from codequest_app.core.signals import attempt_graded, attempt_submitted
from codequest_app.db_instance import db
from ..exceptions import (
    AttemptClosedError,
    AttemptLimitExceededError,
    AttemptNotSubmittedError,
    ItemNotInTestError,
    NotAssignedError,
    ScoreOutOfRangeError,
    TestNotOpenError,
)
from ..logics import grading, lifecycle
from ..models import Test, TestAttempt, TestItem, TestItemSubmission
from .test_service import TestService


class AttemptService:
    """Student-facing attempt lifecycle plus manual grading."""

    @staticmethod
    def get_attempt(attempt_id, lock=False):
        query = TestAttempt.query.filter(TestAttempt.id == attempt_id)
        if lock:
            query = query.with_for_update()
        attempt = query.first()
        if attempt is None:
            raise NotFoundError(f"Attempt {attempt_id} not found", resource='test_attempt')
        return attempt

    @staticmethod
    def _existing_attempts_snapshot(test_id, student_id):
        """(number of attempts counted against the limit, highest attempt_number)."""
        counted = TestAttempt.query.filter(
            TestAttempt.test_id == test_id,
            TestAttempt.student_id == student_id,
            TestAttempt.status.in_(lifecycle.COUNTED_ATTEMPT_STATUSES),
        ).count()
        highest = db.session.query(func.max(TestAttempt.attempt_number)).filter(
            TestAttempt.test_id == test_id,
            TestAttempt.student_id == student_id,
        ).scalar()
        return counted, highest or 0

    @staticmethod
    def start_attempt(test_id, student_id):
        """
        Start a new attempt.

        The (test, student, attempt_number) unique constraint catches two
        concurrent starts; the loser re-reads and re-checks the limit.
        """
        retries = current_app.config.get('START_ATTEMPT_RETRIES', 3)

        for try_number in range(retries + 1):
            test = TestService.get_test(test_id)

            if not TestService.is_assigned(test.id, student_id):
                raise NotAssignedError(test.id, student_id)

            counted, highest = AttemptService._existing_attempts_snapshot(test.id, student_id)
            if counted >= test.max_attempts:
                current_app.logger.warning(
                    f"Student {student_id} hit the attempt limit ({test.max_attempts}) on test {test.id}"
                )
                raise AttemptLimitExceededError(test.id, test.max_attempts)

            now = clock.now()
            reason = lifecycle.closed_reason(test.status, test.start_time, test.end_time, now)
            if reason is not None:
                raise TestNotOpenError(test.id, reason)

            attempt = TestAttempt(
                test_id=test.id,
                student_id=student_id,
                attempt_number=lifecycle.next_attempt_number([highest]),
                started_at=now,
                status=lifecycle.ATTEMPT_IN_PROGRESS,
            )
            db.session.add(attempt)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                current_app.logger.warning(
                    f"Concurrent start for student {student_id} on test {test_id}, "
                    f"retrying ({try_number + 1}/{retries})"
                )
                continue

            current_app.logger.info(
                f"Student {student_id} started attempt #{attempt.attempt_number} (id {attempt.id}) on test {test.id}"
            )
            return attempt

        raise ConflictError(
            'Could not start the attempt because of concurrent requests, please retry',
            code='ATTEMPT_CONFLICT',
            details={'test_id': test_id, 'student_id': student_id},
        )

    @staticmethod
    def _ensure_can_continue(attempt, test, now):
        if attempt.status != lifecycle.ATTEMPT_IN_PROGRESS:
            raise AttemptClosedError(attempt.id, attempt.status)

        reason = lifecycle.closed_reason(test.status, test.start_time, test.end_time, now)
        if reason is None and lifecycle.is_attempt_expired(
                attempt.started_at, test.duration_minutes, test.end_time, now):
            reason = 'time limit exceeded'
        if reason is not None:
            raise TestNotOpenError(test.id, reason)

    @staticmethod
    def submit_item_answer(attempt_id, item_id, answer):
        """Create or replace the answer to one item; objective items are graded at once."""
        attempt = AttemptService.get_attempt(attempt_id, lock=True)
        if attempt.status != lifecycle.ATTEMPT_IN_PROGRESS:
            raise AttemptClosedError(attempt.id, attempt.status)

        item = db.session.get(TestItem, item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found", resource='test_item')
        if item.test_id != attempt.test_id:
            raise ItemNotInTestError(item.id, attempt.test_id)

        now = clock.now()
        AttemptService._ensure_can_continue(attempt, attempt.test, now)

        content = item.content
        if content is None:
            raise NotFoundError(f"Content of item {item.id} not found", resource=item.item_kind)
        is_correct, score = grading.grade_answer(item.item_kind, content.answer_key(), answer, item.points)

        submission = TestItemSubmission.query.filter_by(
            test_attempt_id=attempt.id, test_item_id=item.id
        ).with_for_update().first()
        if submission is None:
            submission = TestItemSubmission(test_attempt_id=attempt.id, test_item_id=item.id)
            db.session.add(submission)

        submission.answer = answer
        submission.is_correct = is_correct
        submission.score = score
        submission.feedback = None
        submission.answered_at = now
        submission.graded_at = now if score is not None else None

        db.session.commit()
        current_app.logger.info(
            f"Attempt {attempt.id} answered item {item.id} ({item.item_kind}), score={score}"
        )
        return submission

    @staticmethod
    def submit_test(attempt_id):
        """
        Finalize an attempt. The total is recomputed from the stored
        submissions, so a retried call cannot double count.
        """
        attempt = AttemptService.get_attempt(attempt_id, lock=True)
        if attempt.status != lifecycle.ATTEMPT_IN_PROGRESS:
            current_app.logger.warning(f"Rejected submit of attempt {attempt.id} in status {attempt.status}")
            raise AttemptClosedError(attempt.id, attempt.status)

        test = attempt.test
        now = clock.now()
        attempt.submitted_at = now
        attempt.time_spent_minutes = lifecycle.time_spent_minutes(attempt.started_at, now)
        attempt.total_score = grading.total_score(s.score for s in attempt.submissions)

        if all(item.is_auto_gradable for item in test.items):
            attempt.status = lifecycle.ATTEMPT_GRADED
        else:
            attempt.status = lifecycle.ATTEMPT_SUBMITTED

        db.session.commit()
        current_app.logger.info(
            f"Attempt {attempt.id} submitted: status={attempt.status} score={attempt.total_score}"
        )

        attempt_submitted.send(
            None,
            user_id=attempt.student_id,
            attempt_id=attempt.id,
            test_id=attempt.test_id,
            status=attempt.status,
        )
        if attempt.status == lifecycle.ATTEMPT_GRADED:
            attempt_graded.send(
                None,
                user_id=attempt.student_id,
                attempt_id=attempt.id,
                test_id=attempt.test_id,
                total_score=attempt.total_score,
            )
        return attempt

    @staticmethod
    def get_submission(submission_id):
        submission = db.session.get(TestItemSubmission, submission_id)
        if submission is None:
            raise NotFoundError(f"Submission {submission_id} not found", resource='test_item_submission')
        return submission

    @staticmethod
    def grade_submission(submission_id, score, feedback=None, grader_id=None):
        """Score one answer manually and re-total its attempt."""
        submission = AttemptService.get_submission(submission_id)
        attempt = AttemptService.get_attempt(submission.test_attempt_id, lock=True)
        submission = TestItemSubmission.query.filter_by(id=submission_id).with_for_update().first()
        item = submission.item

        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidArgumentError("'score' must be an integer", details={'score': score})
        if score < 0:
            raise InvalidArgumentError("'score' cannot be negative", details={'score': score})
        if score > item.points:
            current_app.logger.warning(f"Rejected score {score} > {item.points} on submission {submission.id}")
            raise ScoreOutOfRangeError(score, item.points)
        if attempt.status not in (lifecycle.ATTEMPT_SUBMITTED, lifecycle.ATTEMPT_GRADED):
            raise AttemptNotSubmittedError(attempt.id, attempt.status)

        now = clock.now()
        submission.score = score
        submission.is_correct = score == item.points
        submission.feedback = feedback
        submission.graded_at = now
        submission.graded_by = grader_id

        scores = [s.score for s in attempt.submissions]
        attempt.total_score = grading.total_score(scores)
        newly_graded = False
        if grading.all_scored(scores) and attempt.status != lifecycle.ATTEMPT_GRADED:
            attempt.status = lifecycle.ATTEMPT_GRADED
            newly_graded = True

        db.session.commit()
        current_app.logger.info(
            f"Graded submission {submission.id}: {score}/{item.points}; "
            f"attempt {attempt.id} total={attempt.total_score} status={attempt.status}"
        )

        if newly_graded:
            attempt_graded.send(
                None,
                user_id=attempt.student_id,
                attempt_id=attempt.id,
                test_id=attempt.test_id,
                total_score=attempt.total_score,
            )
        return submission

    @staticmethod
    def abandon_expired_attempts(test_id=None, commit=True):
        """
        Mark in-progress attempts past their deadline as abandoned. Returns the count.
        With ``commit=False`` the caller owns the transaction.
        """
        now = clock.now()
        query = TestAttempt.query.join(Test, Test.id == TestAttempt.test_id)\
            .filter(TestAttempt.status == lifecycle.ATTEMPT_IN_PROGRESS)
        if test_id is not None:
            query = query.filter(TestAttempt.test_id == test_id)

        abandoned = 0
        for attempt in query.with_for_update().all():
            test = attempt.test
            if lifecycle.is_attempt_expired(attempt.started_at, test.duration_minutes, test.end_time, now):
                attempt.status = lifecycle.ATTEMPT_ABANDONED
                abandoned += 1
                current_app.logger.info(f"Attempt {attempt.id} on test {test.id} abandoned (time expired)")

        if abandoned and commit:
            db.session.commit()
        return abandoned

    @staticmethod
    def sweep_expired_attempts():
        return AttemptService.abandon_expired_attempts()

    @staticmethod
    def list_attempts(test_id, student_id=None):
        query = TestAttempt.query.filter_by(test_id=test_id)
        if student_id is not None:
            query = query.filter_by(student_id=student_id)
        return query.order_by(TestAttempt.student_id.asc(), TestAttempt.attempt_number.asc()).all()

