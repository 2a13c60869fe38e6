"""
Streak Service
==============
Manages user learning streaks (consecutive days of activity).
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from codequest_app.core import clock
from codequest_app.db_instance import db
from ..logics.streak_logic import advance_streak
from ..models import UserStreak


class StreakService:
    """Service for managing user activity streaks."""

    @staticmethod
    def get_user_streak(user_id):
        return db.session.get(UserStreak, user_id)

    @staticmethod
    def _locked_streak(user_id):
        streak = UserStreak.query.filter_by(user_id=user_id).with_for_update().first()
        if streak is not None:
            return streak

        streak = UserStreak(user_id=user_id, current_streak=0, longest_streak=0)
        db.session.add(streak)
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            streak = UserStreak.query.filter_by(user_id=user_id).with_for_update().first()
        return streak

    @staticmethod
    def record_activity(user_id):
        """
        Count today as an active day for the user.

        Returns the UserStreak row.
        """
        today = clock.now().date()
        streak = StreakService._locked_streak(user_id)

        old_streak = streak.current_streak or 0
        streak.current_streak, streak.longest_streak = advance_streak(
            old_streak, streak.longest_streak or 0, streak.last_activity_date, today
        )
        streak.last_activity_date = today
        db.session.commit()

        if streak.current_streak != old_streak:
            current_app.logger.info(f"User {user_id} streak {old_streak} -> {streak.current_streak}")
        return streak
