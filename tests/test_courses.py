"""
Tests for the course catalog, enrollment and lesson progress.
"""

import pytest

from codequest_app import db
from codequest_app.core.error_handlers import ConflictError, InvalidArgumentError, NotFoundError
from codequest_app.models import ExpTransaction, Flashcard, User, UserStreak
from codequest_app.modules.course.logics.progress_logic import is_complete, progress_percentage
from codequest_app.modules.course.services.course_service import CourseService
from codequest_app.modules.course.services.enrollment_service import EnrollmentService
from codequest_app.modules.course.services.progress_service import CourseProgressService
from codequest_app.modules.flashcard.services.review_service import ReviewService


@pytest.fixture
def teacher(make_user):
    return make_user(role=User.ROLE_TEACHER)


@pytest.fixture
def course(clock, teacher):
    course = CourseService.create_course(teacher.user_id, {
        'title': 'Python Basics',
        'is_published': True,
        'completion_exp_reward': 50,
    })
    for title, reward in (('Variables', 10), ('Loops', 10), ('Functions', 0)):
        CourseService.add_lesson(course.id, {'title': title, 'exp_reward': reward})
    return course


class ProgressLogicTests:

    @pytest.mark.parametrize('completed, total, expected', [
        (0, 3, 0),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),
        (3, 3, 100),
        (0, 0, 0),
    ])
    def test_percentage(self, completed, total, expected):
        assert progress_percentage(completed, total) == expected

    def test_empty_course_never_complete(self):
        assert is_complete(0, 0) is False
        assert is_complete(2, 2) is True


class CatalogTests:

    def test_lessons_numbered_in_order(self, course):
        assert [(lesson.title, lesson.order) for lesson in course.lessons] == [
            ('Variables', 1), ('Loops', 2), ('Functions', 3),
        ]

    def test_unique_slugs(self, clock, teacher, course):
        other = CourseService.create_course(teacher.user_id, {'title': 'Python Basics'})
        assert (course.slug, other.slug) == ('python-basics', 'python-basics-2')

    def test_negative_reward_rejected(self, clock, teacher):
        with pytest.raises(InvalidArgumentError):
            CourseService.create_course(teacher.user_id, {'title': 'Bad', 'completion_exp_reward': -5})

    def test_students_only_see_published(self, clock, teacher, course, make_user):
        CourseService.create_course(teacher.user_id, {'title': 'Work in progress'})
        student = make_user()

        assert [c.id for c in CourseService.list_courses(student)] == [course.id]
        assert len(CourseService.list_courses(teacher)) == 2

    def test_flashcards_and_tests_point_at_real_rows(self, clock, teacher, course):
        lesson = course.lessons[0]
        card = ReviewService.create_flashcard(teacher.user_id, {
            'front': 'What is a variable?', 'back': 'A name bound to a value', 'lesson_id': lesson.id,
        })
        assert card.lesson_id == lesson.id

        with pytest.raises(NotFoundError):
            ReviewService.create_flashcard(teacher.user_id, {'front': 'a', 'back': 'b', 'lesson_id': 999})

        CourseService.remove_lesson(course.id, lesson.id)
        db.session.expire_all()
        assert db.session.get(Flashcard, card.id).lesson_id is None


class EnrollmentTests:

    def test_enroll_once(self, course, make_user):
        student = make_user()
        EnrollmentService.enroll(student.user_id, course.id)
        assert EnrollmentService.is_enrolled(student.user_id, course.id)

        with pytest.raises(ConflictError) as excinfo:
            EnrollmentService.enroll(student.user_id, course.id)
        assert excinfo.value.code == 'ALREADY_ENROLLED'

    def test_unpublished_course_closed_to_self_enrollment(self, clock, teacher, make_user):
        draft = CourseService.create_course(teacher.user_id, {'title': 'Hidden'})
        with pytest.raises(ConflictError) as excinfo:
            EnrollmentService.enroll(make_user().user_id, draft.id)
        assert excinfo.value.code == 'COURSE_NOT_PUBLISHED'

    def test_bulk_enrollment_reports_errors(self, clock, teacher, make_user):
        draft = CourseService.create_course(teacher.user_id, {'title': 'Cohort'})
        first, second = make_user(), make_user()
        EnrollmentService.enroll_students(draft.id, [first.user_id])

        result = EnrollmentService.enroll_students(draft.id, [first.user_id, second.user_id, teacher.user_id])

        assert result['enrolled'] == [second.user_id]
        assert result['total_errors'] == 2
        assert [e['student_id'] for e in result['errors']] == [first.user_id, teacher.user_id]
        assert len(EnrollmentService.get_enrolled_students(draft.id)) == 2

    def test_unenroll(self, course, make_user):
        student = make_user()
        EnrollmentService.enroll(student.user_id, course.id)
        EnrollmentService.unenroll(student.user_id, course.id)
        assert not EnrollmentService.is_enrolled(student.user_id, course.id)

        with pytest.raises(NotFoundError):
            EnrollmentService.unenroll(student.user_id, course.id)


class LessonProgressTests:

    def test_completion_enrolls_and_awards_xp(self, clock, course, make_user):
        student = make_user()
        lesson = course.lessons[0]

        progress = CourseProgressService.complete_lesson(student.user_id, lesson.id)

        assert progress['enrolled'] is True
        assert progress['completed_lessons'] == 1
        assert progress['progress_percent'] == 33
        assert db.session.get(User, student.user_id).total_xp == 10
        assert ExpTransaction.query.filter_by(source_kind='LESSON', source_id=lesson.id).count() == 1
        assert db.session.get(UserStreak, student.user_id).current_streak == 1

    def test_completing_twice_awards_once(self, clock, course, make_user):
        student = make_user()
        lesson = course.lessons[1]
        CourseProgressService.complete_lesson(student.user_id, lesson.id)
        progress = CourseProgressService.complete_lesson(student.user_id, lesson.id)

        assert progress['completed_lessons'] == 1
        assert db.session.get(User, student.user_id).total_xp == 10

    def test_course_completion_reward(self, clock, course, make_user):
        student = make_user()
        for lesson in course.lessons:
            progress = CourseProgressService.complete_lesson(student.user_id, lesson.id)

        assert progress['progress_percent'] == 100
        assert progress['completed_at'] == clock.current.isoformat()
        # 10 + 10 + 0 for lessons, 50 for the course
        assert db.session.get(User, student.user_id).total_xp == 70
        assert ExpTransaction.query.filter_by(source_kind='COURSE', source_id=course.id).count() == 1

    def test_new_lesson_after_completion_does_not_repeat_reward(self, clock, course, make_user):
        student = make_user()
        for lesson in course.lessons:
            CourseProgressService.complete_lesson(student.user_id, lesson.id)
        extra = CourseService.add_lesson(course.id, {'title': 'Classes', 'exp_reward': 5})

        progress = CourseProgressService.complete_lesson(student.user_id, extra.id)

        assert progress['progress_percent'] == 100
        assert db.session.get(User, student.user_id).total_xp == 75
        assert ExpTransaction.query.filter_by(source_kind='COURSE').count() == 1

    def test_unknown_lesson(self, app, make_user):
        with pytest.raises(NotFoundError):
            CourseProgressService.complete_lesson(make_user().user_id, 999)


class CourseApiTests:

    def test_teacher_builds_and_student_completes(self, client, login, clock, teacher, make_user):
        student = make_user()
        login(teacher)
        response = client.post('/api/courses', json={'title': 'Loops 101', 'is_published': True})
        assert response.status_code == 201
        course_id = response.get_json()['data']['id']
        lesson_id = client.post(f'/api/courses/{course_id}/lessons',
                                json={'title': 'for', 'content': 'Iterate.', 'exp_reward': 15}).get_json()['data']['id']

        login(student)
        assert client.post(f'/api/courses/{course_id}/lessons', json={'title': 'x'}).status_code == 403
        assert client.post(f'/api/courses/{course_id}/enroll').status_code == 201
        assert client.post(f'/api/courses/{course_id}/enroll').status_code == 409

        response = client.post(f'/api/courses/{course_id}/lessons/{lesson_id}/complete')
        assert response.status_code == 200
        assert response.get_json()['data']['progress_percent'] == 100

        mine = client.get('/api/courses/mine').get_json()['data']
        assert [c['id'] for c in mine] == [course_id]
        assert client.get('/api/auth/me').get_json()['data']['total_xp'] == 15

        login(teacher)
        students = client.get(f'/api/courses/{course_id}/students').get_json()['data']
        assert [(s['user_id'], s['username']) for s in students] == [(student.user_id, student.username)]

    def test_unpublished_course_hidden_from_students(self, client, login, clock, teacher, make_user):
        login(teacher)
        course_id = client.post('/api/courses', json={'title': 'Secret'}).get_json()['data']['id']
        lesson_id = client.post(f'/api/courses/{course_id}/lessons', json={'title': 'Intro'}).get_json()['data']['id']

        login(make_user())
        assert client.get(f'/api/courses/{course_id}').status_code == 404
        assert client.post(f'/api/courses/{course_id}/lessons/{lesson_id}/complete').status_code == 404

    def test_other_teacher_cannot_edit(self, client, login, clock, teacher, make_user):
        login(teacher)
        course_id = client.post('/api/courses', json={'title': 'Mine'}).get_json()['data']['id']

        login(make_user(role=User.ROLE_TEACHER))
        assert client.put(f'/api/courses/{course_id}', json={'title': 'Stolen'}).status_code == 403
