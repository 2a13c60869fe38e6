import random

from flask import request
from flask_login import current_user, login_required

from codequest_app.core.error_handlers import (
    AuthorizationError,
    InvalidArgumentError,
    NotFoundError,
    success_response,
)
from codequest_app.models import User
from ..access_control.decorators import ensure_owner_or_admin, require_role
from . import assessment_api_bp
from .logics import grading, lifecycle
from .services.attempt_service import AttemptService
from .services.test_service import TestService


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgumentError('Request body must be a JSON object')
    return data


def _managed_test(test_id):
    """The test, if the current user may manage it."""
    test = TestService.get_test(test_id)
    ensure_owner_or_admin(test.teacher_id)
    return test


def _can_manage(test):
    return current_user.is_admin or current_user.user_id == test.teacher_id


def _scores_visible(test):
    """Scores reach students at once, or when the test is over."""
    return (
        _can_manage(test)
        or test.show_results_immediately
        or test.status in (lifecycle.STATUS_CLOSED, lifecycle.STATUS_ARCHIVED)
    )


def _visible_test(test_id):
    test = TestService.get_test(test_id)
    if _can_manage(test):
        return test
    if test.status != lifecycle.STATUS_DRAFT and TestService.is_assigned(test.id, current_user.user_id):
        return test
    # Hide tests the user cannot see
    raise NotFoundError(f"Test {test_id} not found", resource='test')


def _own_attempt(attempt_id):
    attempt = AttemptService.get_attempt(attempt_id)
    if attempt.student_id != current_user.user_id:
        raise AuthorizationError('This attempt belongs to another student')
    return attempt


# ----------------------------------------------------------------------
# Tests
# ----------------------------------------------------------------------
@assessment_api_bp.route('', methods=['GET'])
@login_required
def list_tests():
    tests = TestService.list_tests(current_user)
    return success_response([test.to_dict() for test in tests])


@assessment_api_bp.route('', methods=['POST'])
@login_required
@require_role(User.ROLE_TEACHER)
def create_test():
    test = TestService.create_test(current_user.user_id, _json_body())
    return success_response(test.to_dict(), message='Test created', status_code=201)


@assessment_api_bp.route('/<int:test_id>', methods=['GET'])
@login_required
def get_test(test_id):
    return success_response(_visible_test(test_id).to_dict())


@assessment_api_bp.route('/<int:test_id>', methods=['PUT'])
@login_required
@require_role(User.ROLE_TEACHER)
def update_test(test_id):
    _managed_test(test_id)
    test = TestService.update_test(test_id, _json_body())
    return success_response(test.to_dict(), message='Test updated')


@assessment_api_bp.route('/<int:test_id>', methods=['DELETE'])
@login_required
@require_role(User.ROLE_TEACHER)
def delete_test(test_id):
    _managed_test(test_id)
    TestService.delete_test(test_id)
    return success_response(message='Test deleted')


_TRANSITIONS = {
    'schedule': TestService.schedule_test,
    'activate': TestService.activate_test,
    'close': TestService.close_test,
    'archive': TestService.archive_test,
}


@assessment_api_bp.route('/<int:test_id>/<any(schedule, activate, close, archive):action>', methods=['POST'])
@login_required
@require_role(User.ROLE_TEACHER)
def change_status(test_id, action):
    _managed_test(test_id)
    test = _TRANSITIONS[action](test_id)
    return success_response(test.to_dict(), message=f'Test is now {test.status}')


# ----------------------------------------------------------------------
# Items
# ----------------------------------------------------------------------
_ITEM_BUILDERS = {
    'quiz': TestService.add_quiz_question,
    'essay': TestService.add_essay_question,
    'coding': TestService.add_coding_challenge,
    'ctf': TestService.add_ctf_challenge,
}

_ITEM_KINDS = {
    'quiz': grading.KIND_QUIZ,
    'essay': grading.KIND_ESSAY,
    'coding': grading.KIND_CODING,
    'ctf': grading.KIND_CTF,
}


@assessment_api_bp.route('/<int:test_id>/items', methods=['GET'])
@login_required
def list_items(test_id):
    test = _visible_test(test_id)
    include_answers = _can_manage(test)
    items = list(test.items)
    if test.shuffle_questions and not include_answers:
        # Stable order per student
        random.Random(f'{test.id}:{current_user.user_id}').shuffle(items)
    return success_response([item.to_dict(include_answers=include_answers) for item in items])


@assessment_api_bp.route('/<int:test_id>/items/<any(quiz, essay, coding, ctf):kind>', methods=['POST'])
@login_required
@require_role(User.ROLE_TEACHER)
def add_item(test_id, kind):
    _managed_test(test_id)
    item = _ITEM_BUILDERS[kind](test_id, _json_body())
    return success_response(item.to_dict(include_answers=True), message='Item added', status_code=201)


@assessment_api_bp.route(
    '/<int:test_id>/items/<any(quiz, essay, coding, ctf):kind>/<int:ref_id>', methods=['POST']
)
@login_required
@require_role(User.ROLE_TEACHER)
def add_existing_item(test_id, kind, ref_id):
    """Attach a question or challenge that already exists to this test."""
    _managed_test(test_id)
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    item = TestService.add_existing_item(test_id, _ITEM_KINDS[kind], ref_id, data)
    return success_response(item.to_dict(include_answers=True), message='Item added', status_code=201)


@assessment_api_bp.route('/<int:test_id>/items/<int:item_id>', methods=['PUT'])
@login_required
@require_role(User.ROLE_TEACHER)
def update_item(test_id, item_id):
    _managed_test(test_id)
    item = TestService.update_item(test_id, item_id, _json_body())
    return success_response(item.to_dict(include_answers=True), message='Item updated')


@assessment_api_bp.route('/<int:test_id>/items/<int:item_id>', methods=['DELETE'])
@login_required
@require_role(User.ROLE_TEACHER)
def remove_item(test_id, item_id):
    _managed_test(test_id)
    TestService.remove_item(test_id, item_id)
    return success_response(message='Item removed')


# ----------------------------------------------------------------------
# Roster
# ----------------------------------------------------------------------
@assessment_api_bp.route('/<int:test_id>/students', methods=['GET'])
@login_required
@require_role(User.ROLE_TEACHER)
def list_students(test_id):
    _managed_test(test_id)
    students = TestService.get_roster(test_id)
    return success_response([student.to_dict() for student in students])


@assessment_api_bp.route('/<int:test_id>/students', methods=['POST'])
@login_required
@require_role(User.ROLE_TEACHER)
def assign_students(test_id):
    _managed_test(test_id)
    added = TestService.assign_students(test_id, _json_body().get('student_ids'))
    return success_response({'added': added})


@assessment_api_bp.route('/<int:test_id>/students', methods=['DELETE'])
@login_required
@require_role(User.ROLE_TEACHER)
def remove_students(test_id):
    _managed_test(test_id)
    removed = TestService.remove_students(test_id, _json_body().get('student_ids'))
    return success_response({'removed': removed})


# ----------------------------------------------------------------------
# Attempts
# ----------------------------------------------------------------------
@assessment_api_bp.route('/<int:test_id>/attempts', methods=['POST'])
@login_required
@require_role(User.ROLE_STUDENT)
def start_attempt(test_id):
    attempt = AttemptService.start_attempt(test_id, current_user.user_id)
    return success_response(attempt.to_dict(), message='Attempt started', status_code=201)


@assessment_api_bp.route('/<int:test_id>/attempts', methods=['GET'])
@login_required
@require_role(User.ROLE_TEACHER)
def list_attempts(test_id):
    _managed_test(test_id)
    student_id = request.args.get('student_id', type=int)
    attempts = AttemptService.list_attempts(test_id, student_id)
    return success_response([attempt.to_dict() for attempt in attempts])


@assessment_api_bp.route('/attempts/<int:attempt_id>', methods=['GET'])
@login_required
def get_attempt(attempt_id):
    attempt = AttemptService.get_attempt(attempt_id)
    test = attempt.test
    if not _can_manage(test) and attempt.student_id != current_user.user_id:
        raise AuthorizationError('This attempt belongs to another student')
    # Answers stay hidden from the student unless review is allowed
    include_submissions = _can_manage(test) or test.allow_review
    return success_response(attempt.to_dict(
        include_submissions=include_submissions, include_scores=_scores_visible(test)
    ))


@assessment_api_bp.route('/attempts/<int:attempt_id>/items/<int:item_id>', methods=['PUT'])
@login_required
def submit_item_answer(attempt_id, item_id):
    _own_attempt(attempt_id)
    data = _json_body()
    if 'answer' not in data:
        raise InvalidArgumentError("'answer' is required")
    submission = AttemptService.submit_item_answer(attempt_id, item_id, data['answer'])
    return success_response(submission.to_dict(include_scores=_scores_visible(submission.attempt.test)))


@assessment_api_bp.route('/attempts/<int:attempt_id>/submit', methods=['POST'])
@login_required
def submit_test(attempt_id):
    _own_attempt(attempt_id)
    attempt = AttemptService.submit_test(attempt_id)
    data = attempt.to_dict(include_scores=_scores_visible(attempt.test))
    return success_response(data, message=f'Attempt {attempt.status}')


# ----------------------------------------------------------------------
# Grading & statistics
# ----------------------------------------------------------------------
@assessment_api_bp.route('/submissions/<int:submission_id>/grade', methods=['POST'])
@login_required
@require_role(User.ROLE_TEACHER)
def grade_submission(submission_id):
    submission = AttemptService.get_submission(submission_id)
    ensure_owner_or_admin(submission.attempt.test.teacher_id)

    data = _json_body()
    if 'score' not in data:
        raise InvalidArgumentError("'score' is required")
    submission = AttemptService.grade_submission(
        submission_id, data['score'], data.get('feedback'), grader_id=current_user.user_id
    )
    return success_response({
        'submission': submission.to_dict(),
        'attempt': submission.attempt.to_dict(),
    })


@assessment_api_bp.route('/<int:test_id>/pending', methods=['GET'])
@login_required
@require_role(User.ROLE_TEACHER)
def pending_submissions(test_id):
    _managed_test(test_id)
    submissions = TestService.get_pending_submissions(test_id)
    return success_response([submission.to_dict() for submission in submissions])


@assessment_api_bp.route('/<int:test_id>/statistics', methods=['GET'])
@login_required
@require_role(User.ROLE_TEACHER)
def test_statistics(test_id):
    _managed_test(test_id)
    return success_response(TestService.get_test_statistics(test_id))


@assessment_api_bp.route('/<int:test_id>/my-stats', methods=['GET'])
@login_required
def my_test_stats(test_id):
    test = _visible_test(test_id)
    return success_response(TestService.get_student_test_stats(
        test_id, current_user.user_id, include_scores=_scores_visible(test)
    ))


@assessment_api_bp.route('/<int:test_id>/leaderboard', methods=['GET'])
@login_required
def test_leaderboard(test_id):
    test = _visible_test(test_id)
    limit = request.args.get('limit', 10, type=int)
    board = TestService.get_test_leaderboard(test_id, limit)
    if not _scores_visible(test):
        for entry in board:
            entry['total_score'] = None
    return success_response(board)
