"""
End-to-end tests of the /api/tests endpoints.
"""

from datetime import timedelta

import pytest

from codequest_app.models import User


@pytest.fixture
def teacher(make_user):
    return make_user(role=User.ROLE_TEACHER)


def _create_open_test(client, clock, student_ids, max_attempts=1):
    start = (clock.current - timedelta(minutes=5)).isoformat()
    end = (clock.current + timedelta(hours=1)).isoformat()
    response = client.post('/api/tests', json={
        'title': 'Control Flow',
        'start_time': start,
        'end_time': end,
        'duration_minutes': 30,
        'max_attempts': max_attempts,
        'show_results_immediately': True,
    })
    assert response.status_code == 201, response.get_json()
    test_id = response.get_json()['data']['id']

    response = client.post(f'/api/tests/{test_id}/items/quiz', json={
        'question': 'Is 0 falsy in Python?', 'type': 'boolean', 'correct_answer': 'true', 'points': 4,
    })
    assert response.status_code == 201
    response = client.post(f'/api/tests/{test_id}/items/coding', json={
        'title': 'Add', 'problem_statement': 'Print a + b',
        'test_cases': [{'input': '1 2', 'expected_output': '3'}], 'points': 6,
    })
    assert response.status_code == 201

    assert client.post(f'/api/tests/{test_id}/students', json={'student_ids': student_ids}).status_code == 200
    assert client.post(f'/api/tests/{test_id}/schedule').status_code == 200
    assert client.post(f'/api/tests/{test_id}/activate').status_code == 200
    return test_id


def test_full_flow(client, login, clock, teacher, make_user):
    student = make_user()
    login(teacher)
    test_id = _create_open_test(client, clock, [student.user_id])

    login(student)
    items = client.get(f'/api/tests/{test_id}/items').get_json()['data']
    assert len(items) == 2
    assert all('correct_answer' not in item['content'] for item in items)
    by_kind = {item['item_kind']: item['id'] for item in items}

    response = client.post(f'/api/tests/{test_id}/attempts')
    assert response.status_code == 201
    attempt_id = response.get_json()['data']['id']

    response = client.put(f'/api/tests/attempts/{attempt_id}/items/{by_kind["quiz_question"]}',
                          json={'answer': True})
    assert response.get_json()['data']['score'] == 4
    client.put(f'/api/tests/attempts/{attempt_id}/items/{by_kind["coding_challenge"]}',
               json={'answer': {'outputs': ['3']}})

    clock.advance(minutes=10)
    response = client.post(f'/api/tests/attempts/{attempt_id}/submit')
    data = response.get_json()['data']
    assert data['status'] == 'graded'
    assert data['total_score'] == 10

    response = client.post(f'/api/tests/attempts/{attempt_id}/submit')
    assert response.status_code == 409
    assert response.get_json()['code'] == 'ATTEMPT_CLOSED'

    response = client.post(f'/api/tests/{test_id}/attempts')
    assert response.status_code == 409
    assert response.get_json()['code'] == 'ATTEMPT_LIMIT_EXCEEDED'

    stats = client.get(f'/api/tests/{test_id}/my-stats').get_json()['data']
    assert stats['best_score'] == 10
    assert stats['attempts_remaining'] == 0

    # Graded attempts award XP
    me = client.get('/api/auth/me').get_json()['data']
    assert me['total_xp'] == 10


def test_essay_grading_flow(client, login, clock, teacher, make_user):
    student = make_user()
    login(teacher)
    response = client.post('/api/tests', json={'title': 'Essays', 'max_attempts': 2})
    test_id = response.get_json()['data']['id']
    client.post(f'/api/tests/{test_id}/items/essay', json={'question': 'Why tests?', 'points': 10})
    client.post(f'/api/tests/{test_id}/students', json={'student_ids': [student.user_id]})
    client.post(f'/api/tests/{test_id}/schedule')

    login(student)
    attempt_id = client.post(f'/api/tests/{test_id}/attempts').get_json()['data']['id']
    item_id = client.get(f'/api/tests/{test_id}/items').get_json()['data'][0]['id']
    response = client.put(f'/api/tests/attempts/{attempt_id}/items/{item_id}', json={'answer': 'Confidence.'})
    submission_id = response.get_json()['data']['id']
    assert client.post(f'/api/tests/attempts/{attempt_id}/submit').get_json()['data']['status'] == 'submitted'

    # Students cannot grade
    response = client.post(f'/api/tests/submissions/{submission_id}/grade', json={'score': 5})
    assert response.status_code == 403

    login(teacher)
    pending = client.get(f'/api/tests/{test_id}/pending').get_json()['data']
    assert [p['id'] for p in pending] == [submission_id]

    response = client.post(f'/api/tests/submissions/{submission_id}/grade', json={'score': 11})
    assert response.status_code == 422
    assert response.get_json()['code'] == 'OUT_OF_RANGE'

    response = client.post(f'/api/tests/submissions/{submission_id}/grade',
                           json={'score': 8, 'feedback': 'Solid'})
    assert response.status_code == 200
    assert response.get_json()['data']['attempt']['status'] == 'graded'
    assert response.get_json()['data']['attempt']['total_score'] == 8

    # Results stay hidden from the student until the test closes
    login(student)
    stats = client.get(f'/api/tests/{test_id}/my-stats').get_json()['data']
    assert stats['best_score'] is None
    assert [attempt['total_score'] for attempt in stats['attempts']] == [None]
    assert client.get(f'/api/tests/attempts/{attempt_id}').get_json()['data']['total_score'] is None

    login(teacher)
    response = client.post(f'/api/tests/{test_id}/close')
    assert response.status_code == 200
    assert response.get_json()['data']['status'] == 'closed'

    login(student)
    stats = client.get(f'/api/tests/{test_id}/my-stats').get_json()['data']
    assert stats['best_score'] == 8
    assert stats['attempts'][0]['total_score'] == 8


def test_other_teacher_cannot_manage(client, login, clock, teacher, make_user):
    login(teacher)
    test_id = client.post('/api/tests', json={'title': 'Mine'}).get_json()['data']['id']

    login(make_user(role=User.ROLE_TEACHER))
    response = client.put(f'/api/tests/{test_id}', json={'title': 'Stolen'})
    assert response.status_code == 403


def test_invalid_transition_is_conflict(client, login, clock, teacher):
    login(teacher)
    test_id = client.post('/api/tests', json={'title': 'Draft'}).get_json()['data']['id']

    response = client.post(f'/api/tests/{test_id}/activate')
    assert response.status_code == 409
    assert response.get_json()['code'] == 'INVALID_TRANSITION'

    response = client.post(f'/api/tests/{test_id}/close')
    assert response.status_code == 409


def test_unassigned_student_cannot_see_test(client, login, clock, teacher, make_user):
    student = make_user()
    login(teacher)
    test_id = _create_open_test(client, clock, [student.user_id])

    login(make_user())
    assert client.get(f'/api/tests/{test_id}').status_code == 404
    response = client.post(f'/api/tests/{test_id}/attempts')
    assert response.status_code == 403
    assert response.get_json()['code'] == 'NOT_ASSIGNED'


def test_close_endpoint(client, login, clock, teacher, make_user):
    student = make_user()
    login(teacher)
    test_id = _create_open_test(client, clock, [student.user_id])

    response = client.post(f'/api/tests/{test_id}/close')
    assert response.status_code == 200
    assert response.get_json()['data']['status'] == 'closed'

    response = client.post(f'/api/tests/{test_id}/close')
    assert response.status_code == 409
    assert response.get_json()['code'] == 'ALREADY_CLOSED'

    login(student)
    response = client.post(f'/api/tests/{test_id}/attempts')
    assert response.status_code == 409
    assert response.get_json()['code'] == 'TEST_NOT_OPEN'


def test_item_update_and_reuse_endpoints(client, login, clock, teacher):
    login(teacher)
    source_id = client.post('/api/tests', json={'title': 'Bank'}).get_json()['data']['id']
    target_id = client.post('/api/tests', json={'title': 'Quiz night'}).get_json()['data']['id']

    item = client.post(f'/api/tests/{source_id}/items/quiz', json={
        'question': 'Is None falsy?', 'type': 'boolean', 'correct_answer': 'true', 'points': 2,
    }).get_json()['data']

    response = client.put(f'/api/tests/{source_id}/items/{item["id"]}',
                          json={'points': 5, 'explanation': 'bool(None) is False'})
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['points'] == 5
    assert data['content']['explanation'] == 'bool(None) is False'
    assert client.get(f'/api/tests/{source_id}').get_json()['data']['total_points'] == 5

    response = client.put(f'/api/tests/{source_id}/items/{item["id"]}', json={'type': 'essay'})
    assert response.status_code == 400

    response = client.post(f'/api/tests/{target_id}/items/quiz/{item["content"]["id"]}', json={'points': 3})
    assert response.status_code == 201
    assert response.get_json()['data']['content']['question'] == 'Is None falsy?'

    response = client.post(f'/api/tests/{target_id}/items/ctf/999')
    assert response.status_code == 404
