"""
Tests for the pure test-lifecycle and auto-grading rules.
"""

from datetime import datetime, timedelta

import pytest

from codequest_app.modules.assessment.logics import grading, lifecycle
from codequest_app.modules.assessment.logics.slugs import slugify, unique_slug

NOW = datetime(2024, 3, 1, 9, 0, 0)


class StatusMachineTests:

    @pytest.mark.parametrize('old, new', [
        ('draft', 'scheduled'),
        ('scheduled', 'active'),
        ('active', 'closed'),
        ('scheduled', 'closed'),
        ('closed', 'archived'),
        ('draft', 'archived'),
        ('active', 'archived'),
    ])
    def test_allowed(self, old, new):
        assert lifecycle.can_transition(old, new)

    @pytest.mark.parametrize('old, new', [
        ('draft', 'active'),
        ('draft', 'closed'),
        ('closed', 'active'),
        ('archived', 'draft'),
        ('archived', 'archived'),
    ])
    def test_rejected(self, old, new):
        assert not lifecycle.can_transition(old, new)


class WindowTests:

    def test_unbounded_window_is_open(self):
        assert lifecycle.is_window_open(None, None, NOW)

    def test_bounds_are_inclusive(self):
        assert lifecycle.is_window_open(NOW, NOW, NOW)
        assert not lifecycle.is_window_open(NOW + timedelta(seconds=1), None, NOW)
        assert not lifecycle.is_window_open(None, NOW - timedelta(seconds=1), NOW)

    def test_closed_reason_needs_status_and_window(self):
        start, end = NOW - timedelta(hours=1), NOW + timedelta(hours=1)
        assert lifecycle.closed_reason('active', start, end, NOW) is None
        assert lifecycle.closed_reason('scheduled', start, end, NOW) is None
        assert lifecycle.closed_reason('draft', start, end, NOW) == 'status is draft'
        assert lifecycle.closed_reason('active', end, None, NOW) == 'test has not started yet'
        assert lifecycle.closed_reason('active', None, start, NOW) == 'test has ended'


class AttemptTimingTests:

    def test_deadline_is_earliest_limit(self):
        end = NOW + timedelta(minutes=30)
        assert lifecycle.attempt_deadline(NOW, 60, end) == end
        assert lifecycle.attempt_deadline(NOW, 20, end) == NOW + timedelta(minutes=20)
        assert lifecycle.attempt_deadline(NOW, None, None) is None

    def test_expiry(self):
        assert not lifecycle.is_attempt_expired(NOW, 30, None, NOW + timedelta(minutes=30))
        assert lifecycle.is_attempt_expired(NOW, 30, None, NOW + timedelta(minutes=31))
        assert not lifecycle.is_attempt_expired(NOW, None, None, NOW + timedelta(days=365))

    def test_time_spent(self):
        assert lifecycle.time_spent_minutes(NOW, NOW + timedelta(minutes=12, seconds=59)) == 12
        assert lifecycle.time_spent_minutes(NOW, NOW - timedelta(minutes=5)) == 0

    def test_next_attempt_number(self):
        assert lifecycle.next_attempt_number([]) == 1
        assert lifecycle.next_attempt_number([1, 3, 2]) == 4


class GradingTests:

    def test_multiple_choice(self):
        key = {'type': 'multiple_choice', 'correct_answer': 'B'}
        assert grading.grade_answer(grading.KIND_QUIZ, key, ' b ', 5) == (True, 5)
        assert grading.grade_answer(grading.KIND_QUIZ, key, {'answer': 'C'}, 5) == (False, 0)
        assert grading.grade_answer(grading.KIND_QUIZ, key, None, 5) == (False, 0)

    def test_boolean(self):
        key = {'type': 'boolean', 'correct_answer': 'true'}
        assert grading.grade_answer(grading.KIND_QUIZ, key, True, 2) == (True, 2)
        assert grading.grade_answer(grading.KIND_QUIZ, key, 'Yes', 2) == (True, 2)
        assert grading.grade_answer(grading.KIND_QUIZ, key, 'false', 2) == (False, 0)

    def test_coding_outputs(self):
        key = {'test_cases': [
            {'input': '1 2', 'expected_output': '3'},
            {'input': '2 5', 'expected_output': '7'},
        ]}
        assert grading.grade_answer(grading.KIND_CODING, key, {'outputs': ['3', '7\n']}, 10) == (True, 10)
        assert grading.grade_answer(grading.KIND_CODING, key, {'outputs': ['3', '8']}, 10) == (False, 0)
        assert grading.grade_answer(grading.KIND_CODING, key, {'outputs': ['3']}, 10) == (False, 0)
        assert grading.grade_answer(grading.KIND_CODING, key, {'code': 'print(3)'}, 10) == (False, 0)

    def test_ctf_flag(self):
        key = {'flag': 'FLAG{py}'}
        assert grading.grade_answer(grading.KIND_CTF, key, {'flag': 'FLAG{py}'}, 4) == (True, 4)
        assert grading.grade_answer(grading.KIND_CTF, key, 'flag{py}', 4) == (False, 0)

    def test_essay_is_manual(self):
        assert grading.grade_answer(grading.KIND_ESSAY, {}, 'Long answer', 10) == (None, None)
        assert not grading.is_auto_gradable(grading.KIND_ESSAY)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            grading.grade_answer('video', {}, 'x', 1)

    def test_totals(self):
        assert grading.total_score([3, None, 4]) == 7
        assert not grading.all_scored([3, None])
        assert grading.all_scored([0, 2])


def test_slugs():
    assert slugify('Python Basics: Loops & Lists!') == 'python-basics-loops-lists'
    assert slugify('!!!') == 'test'
    assert unique_slug('quiz', {'quiz', 'quiz-2'}) == 'quiz-3'
    assert unique_slug('quiz', set()) == 'quiz'
