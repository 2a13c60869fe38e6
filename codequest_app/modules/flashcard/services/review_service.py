"""
Review Service
Loads and stores SM-2 progress rows around the pure scheduler.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from codequest_app.core import clock
from codequest_app.core.error_handlers import InvalidArgumentError, NotFoundError
from codequest_app.core.signals import flashcard_reviewed
from codequest_app.db_instance import db
from codequest_app.modules.course.models import Lesson
from ..logics import sm2
from ..models import Flashcard, UserFlashcardProgress


class ReviewService:
    """Flashcard authoring and review scheduling."""

    @staticmethod
    def create_flashcard(created_by, data):
        front = (data.get('front') or '').strip()
        back = (data.get('back') or '').strip()
        if not front or not back:
            raise InvalidArgumentError("'front' and 'back' are required")

        lesson_id = data.get('lesson_id')
        if lesson_id is not None:
            if isinstance(lesson_id, bool) or not isinstance(lesson_id, int):
                raise InvalidArgumentError("'lesson_id' must be an integer")
            if db.session.get(Lesson, lesson_id) is None:
                raise NotFoundError(f"Lesson {lesson_id} not found", resource='lesson')

        card = Flashcard(
            front=front,
            back=back,
            lesson_id=lesson_id,
            created_by=created_by,
        )
        db.session.add(card)
        db.session.commit()
        current_app.logger.info(f"User {created_by} created flashcard {card.id}")
        return card

    @staticmethod
    def get_flashcard(flashcard_id):
        card = db.session.get(Flashcard, flashcard_id)
        if card is None:
            raise NotFoundError(f"Flashcard {flashcard_id} not found", resource='flashcard')
        return card

    @staticmethod
    def _locked_progress(user_id, flashcard_id, now):
        """Return the progress row under a row lock, creating it when missing."""
        query = UserFlashcardProgress.query.filter_by(user_id=user_id, flashcard_id=flashcard_id)
        progress = query.with_for_update().first()
        if progress is not None:
            return progress

        progress = UserFlashcardProgress(
            user_id=user_id,
            flashcard_id=flashcard_id,
            ease_factor=sm2.DEFAULT_EASE_FACTOR,
            interval=1,
            repetitions=0,
            next_review_at=now,
        )
        db.session.add(progress)
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            # Another request created the row first
            current_app.logger.warning(
                f"Progress row for user {user_id} card {flashcard_id} created concurrently, reloading"
            )
            progress = query.with_for_update().first()
        return progress

    @staticmethod
    def record_review(user_id, flashcard_id, quality):
        """
        Record one review of a flashcard.

        Returns the updated UserFlashcardProgress and emits flashcard_reviewed.
        """
        if isinstance(quality, bool) or not isinstance(quality, int) \
                or not sm2.MIN_QUALITY <= quality <= sm2.MAX_QUALITY:
            raise InvalidArgumentError(
                'quality must be an integer between 0 and 5',
                details={'quality': quality},
            )
        ReviewService.get_flashcard(flashcard_id)

        now = clock.now()
        progress = ReviewService._locked_progress(user_id, flashcard_id, now)

        state = sm2.ReviewState(
            ease_factor=progress.ease_factor,
            interval=progress.interval,
            repetitions=progress.repetitions,
            next_review_at=progress.next_review_at,
            last_reviewed_at=progress.last_reviewed_at,
        )
        new_state = sm2.record_review(state, quality, now)

        progress.ease_factor = new_state.ease_factor
        progress.interval = new_state.interval
        progress.repetitions = new_state.repetitions
        progress.next_review_at = new_state.next_review_at
        progress.last_reviewed_at = new_state.last_reviewed_at

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.error(
                f"Failed to save review of card {flashcard_id} by user {user_id}", exc_info=True
            )
            raise

        current_app.logger.info(
            f"User {user_id} reviewed card {flashcard_id} q={quality}: "
            f"interval={progress.interval} reps={progress.repetitions} ease={progress.ease_factor}"
        )

        flashcard_reviewed.send(
            None,
            user_id=user_id,
            flashcard_id=flashcard_id,
            quality=quality,
            is_correct=sm2.is_successful(quality),
            next_review_at=progress.next_review_at,
        )
        return progress

    @staticmethod
    def get_due_cards(user_id, limit=20):
        """
        Cards due for review (oldest first), topped up with cards never studied.

        Returns a list of (Flashcard, UserFlashcardProgress or None).
        """
        now = clock.now()
        due = db.session.query(Flashcard, UserFlashcardProgress)\
            .join(UserFlashcardProgress, UserFlashcardProgress.flashcard_id == Flashcard.id)\
            .filter(UserFlashcardProgress.user_id == user_id)\
            .filter(UserFlashcardProgress.next_review_at <= now)\
            .order_by(UserFlashcardProgress.next_review_at.asc())\
            .limit(limit).all()

        results = [(card, progress) for card, progress in due]
        remaining = limit - len(results)
        if remaining > 0:
            studied = db.session.query(UserFlashcardProgress.flashcard_id)\
                .filter(UserFlashcardProgress.user_id == user_id)
            new_cards = Flashcard.query.filter(~Flashcard.id.in_(studied))\
                .order_by(Flashcard.id.asc()).limit(remaining).all()
            results.extend((card, None) for card in new_cards)
        return results

    @staticmethod
    def get_progress(user_id, flashcard_id):
        ReviewService.get_flashcard(flashcard_id)
        progress = UserFlashcardProgress.query.filter_by(user_id=user_id, flashcard_id=flashcard_id).first()
        if progress is None:
            raise NotFoundError(
                f"No review progress for flashcard {flashcard_id}", resource='flashcard_progress'
            )
        return progress
