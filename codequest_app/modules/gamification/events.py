"""
Event Handlers for Gamification Module.

Listens to signals from other modules and awards XP, streak days and
achievements. Learning and assessment modules do not know about any of this.
"""
from flask import current_app

from codequest_app.core.signals import (
    attempt_graded,
    attempt_submitted,
    flashcard_reviewed,
    lesson_completed,
    xp_awarded,
)
from codequest_app.db_instance import db


@flashcard_reviewed.connect
def on_flashcard_reviewed(sender, **kwargs):
    """
    Expected kwargs:
        - user_id: int
        - flashcard_id: int
        - quality: int (0-5)
        - is_correct: bool
    """
    from codequest_app.modules.progression.interface import award_xp
    from .services.streak_service import StreakService

    user_id = kwargs.get('user_id')
    if not user_id:
        return

    try:
        StreakService.record_activity(user_id)

        amount = current_app.config.get('FLASHCARD_REVIEW_XP', 0)
        if kwargs.get('is_correct') and amount > 0:
            award_xp(
                user_id,
                amount,
                'Flashcard review',
                source_kind='FLASHCARD_REVIEW',
                source_id=kwargs.get('flashcard_id'),
            )
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"[Gamification] Error handling flashcard review: {e}", exc_info=True)


@attempt_submitted.connect
def on_attempt_submitted(sender, **kwargs):
    from .services.streak_service import StreakService

    user_id = kwargs.get('user_id')
    if not user_id:
        return

    try:
        StreakService.record_activity(user_id)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"[Gamification] Error updating streak: {e}", exc_info=True)


@attempt_graded.connect
def on_attempt_graded(sender, **kwargs):
    """
    Expected kwargs:
        - user_id: int
        - attempt_id: int
        - total_score: int
    """
    from codequest_app.modules.progression.interface import award_xp

    user_id = kwargs.get('user_id')
    amount = (kwargs.get('total_score') or 0) * current_app.config.get('TEST_XP_PER_POINT', 0)
    if not user_id or amount <= 0:
        return

    try:
        award_xp(
            user_id,
            amount,
            'Graded test attempt',
            source_kind='TEST_ATTEMPT',
            source_id=kwargs.get('attempt_id'),
        )
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"[Gamification] Error awarding test XP: {e}", exc_info=True)


@xp_awarded.connect
def on_xp_awarded(sender, **kwargs):
    from .services.achievement_service import AchievementService

    user_id = kwargs.get('user_id')
    if not user_id:
        return

    try:
        AchievementService.check_and_award(user_id)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"[Gamification] Error checking achievements: {e}", exc_info=True)


@lesson_completed.connect
def on_lesson_completed(sender, **kwargs):
    from .services.achievement_service import AchievementService
    from .services.streak_service import StreakService

    user_id = kwargs.get('user_id')
    if not user_id:
        return

    try:
        StreakService.record_activity(user_id)
        AchievementService.check_and_award(user_id)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"[Gamification] Error handling lesson completion: {e}", exc_info=True)
