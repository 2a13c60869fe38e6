"""
Tests for flashcard review scheduling through the service and the API.
"""

from datetime import timedelta

import pytest

from codequest_app import db
from codequest_app.core.error_handlers import InvalidArgumentError, NotFoundError
from codequest_app.models import ExpTransaction, User, UserFlashcardProgress, UserStreak
from codequest_app.modules.flashcard.services.review_service import ReviewService


@pytest.fixture
def teacher(make_user):
    return make_user(role=User.ROLE_TEACHER)


@pytest.fixture
def cards(app, teacher):
    return [
        ReviewService.create_flashcard(teacher.user_id, {'front': f'Q{i}', 'back': f'A{i}'})
        for i in range(3)
    ]


class ReviewServiceTests:

    def test_first_review_creates_progress(self, clock, cards, make_user):
        student = make_user()
        progress = ReviewService.record_review(student.user_id, cards[0].id, 5)

        assert progress.repetitions == 1
        assert progress.interval == 1
        assert progress.ease_factor == 260
        assert progress.last_reviewed_at == clock.current
        assert progress.next_review_at == clock.current + timedelta(days=1)
        assert UserFlashcardProgress.query.count() == 1

    def test_repeated_reviews_update_same_row(self, clock, cards, make_user):
        student = make_user()
        for _ in range(3):
            progress = ReviewService.record_review(student.user_id, cards[0].id, 5)
            clock.advance(days=progress.interval)

        assert UserFlashcardProgress.query.count() == 1
        assert progress.repetitions == 3
        assert progress.interval == 16

    def test_invalid_quality(self, cards, make_user):
        student = make_user()
        with pytest.raises(InvalidArgumentError):
            ReviewService.record_review(student.user_id, cards[0].id, 7)
        assert UserFlashcardProgress.query.count() == 0

    def test_unknown_card(self, app, make_user):
        with pytest.raises(NotFoundError):
            ReviewService.record_review(make_user().user_id, 999, 3)

    def test_successful_review_awards_xp_and_streak(self, app, clock, cards, make_user):
        student = make_user()
        ReviewService.record_review(student.user_id, cards[0].id, 4)
        ReviewService.record_review(student.user_id, cards[1].id, 1)

        user = db.session.get(User, student.user_id)
        assert user.total_xp == app.config['FLASHCARD_REVIEW_XP']
        assert ExpTransaction.query.filter_by(user_id=student.user_id, source_kind='FLASHCARD_REVIEW').count() == 1

        streak = db.session.get(UserStreak, student.user_id)
        assert streak.current_streak == 1
        assert streak.last_activity_date == clock.current.date()

    def test_due_cards(self, clock, cards, make_user):
        student = make_user()
        ReviewService.record_review(student.user_id, cards[0].id, 5)

        due = ReviewService.get_due_cards(student.user_id, limit=10)
        # The reviewed card is not due until tomorrow; the other two are new
        assert [(card.id, progress) for card, progress in due] == [(cards[1].id, None), (cards[2].id, None)]

        clock.advance(days=1)
        due = ReviewService.get_due_cards(student.user_id, limit=10)
        assert due[0][0].id == cards[0].id
        assert due[0][1] is not None

    def test_progress_missing(self, cards, make_user):
        with pytest.raises(NotFoundError):
            ReviewService.get_progress(make_user().user_id, cards[0].id)


class FlashcardApiTests:

    def test_review_endpoint(self, client, login, clock, cards, make_user):
        student = make_user()
        login(student)

        response = client.post(f'/api/flashcards/{cards[0].id}/review', json={'quality': 5})
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['repetitions'] == 1
        assert data['ease_factor'] == 260

        response = client.get(f'/api/flashcards/{cards[0].id}/progress')
        assert response.get_json()['data']['interval'] == 1

    def test_review_rejects_bad_quality(self, client, login, cards, make_user):
        login(make_user())
        response = client.post(f'/api/flashcards/{cards[0].id}/review', json={'quality': 9})
        assert response.status_code == 400
        assert response.get_json()['code'] == 'INVALID_ARGUMENT'

    def test_students_cannot_author(self, client, login, make_user):
        login(make_user())
        response = client.post('/api/flashcards', json={'front': 'a', 'back': 'b'})
        assert response.status_code == 403

    def test_teacher_authors_and_student_sees_due(self, client, login, teacher, make_user):
        login(teacher)
        response = client.post('/api/flashcards', json={'front': 'What is a list?', 'back': 'A sequence'})
        assert response.status_code == 201

        login(make_user())
        data = client.get('/api/flashcards/due').get_json()['data']
        assert data['count'] == 1
        assert data['cards'][0]['front'] == 'What is a list?'
