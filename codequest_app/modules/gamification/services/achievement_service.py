"""
Achievement Service
Evaluates achievement requirements and grants rewards.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from codequest_app.core import clock
from codequest_app.core.error_handlers import ConflictError, InvalidArgumentError, NotFoundError
from codequest_app.core.signals import achievement_earned
from codequest_app.db_instance import db
from codequest_app.models import TestAttempt, User, UserFlashcardProgress, UserLessonProgress
from ..logics import achievement_rules
from ..models import Achievement, UserAchievement, UserStreak

DEFAULT_ACHIEVEMENTS = [
    {'name': 'First Steps', 'description': 'Review your first flashcard.',
     'exp_reward': 10, 'requirements': {'flashcards_reviewed': 1}},
    {'name': 'Card Collector', 'description': 'Study 50 different flashcards.',
     'exp_reward': 50, 'requirements': {'flashcards_reviewed': 50}},
    {'name': 'On Fire', 'description': 'Keep a 7-day learning streak.',
     'exp_reward': 70, 'requirements': {'streak': 7}},
    {'name': 'Test Taker', 'description': 'Get your first test graded.',
     'exp_reward': 20, 'requirements': {'tests_graded': 1}},
    {'name': 'Debug Apprentice', 'description': 'Reach level 5.',
     'exp_reward': 50, 'requirements': {'level': 5}},
    {'name': 'Syntax Warrior', 'description': 'Reach level 10.',
     'exp_reward': 100, 'requirements': {'level': 10}},
]


class AchievementService:
    """Achievement catalogue plus unlock checks."""

    @staticmethod
    def get_achievements():
        return Achievement.query.filter_by(is_active=True).order_by(Achievement.id.asc()).all()

    @staticmethod
    def get_user_achievements(user_id):
        return UserAchievement.query.filter_by(user_id=user_id)\
            .order_by(UserAchievement.earned_at.asc(), UserAchievement.id.asc()).all()

    @staticmethod
    def create_achievement(data):
        name = (data.get('name') or '').strip()
        if not name:
            raise InvalidArgumentError("'name' is required", details={'field': 'name'})

        requirements = data.get('requirements') or {}
        if not isinstance(requirements, dict):
            raise InvalidArgumentError("'requirements' must be an object", details={'field': 'requirements'})
        unknown = [key for key in requirements if key not in Achievement.REQUIREMENT_KEYS]
        if unknown:
            raise InvalidArgumentError('Unknown requirement keys', details={'keys': unknown})
        for key, threshold in requirements.items():
            if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
                raise InvalidArgumentError(
                    f"Requirement '{key}' must be a non-negative integer", details={'field': key}
                )

        exp_reward = data.get('exp_reward', 0)
        if isinstance(exp_reward, bool) or not isinstance(exp_reward, int) or exp_reward < 0:
            raise InvalidArgumentError("'exp_reward' must be a non-negative integer", details={'field': 'exp_reward'})

        achievement = Achievement(
            name=name,
            description=data.get('description') or '',
            icon=data.get('icon'),
            exp_reward=exp_reward,
            requirements=requirements,
        )
        db.session.add(achievement)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError(f"Achievement '{name}' already exists", code='ACHIEVEMENT_EXISTS')
        current_app.logger.info(f"Created achievement {achievement.id} ({name})")
        return achievement

    @staticmethod
    def seed_defaults():
        """Insert the built-in achievements that are missing. Returns the count added."""
        existing = {name for (name,) in db.session.query(Achievement.name)}
        added = 0
        for data in DEFAULT_ACHIEVEMENTS:
            if data['name'] in existing:
                continue
            db.session.add(Achievement(**data))
            added += 1
        db.session.commit()
        return added

    @staticmethod
    def collect_stats(user_id):
        """Current values of every requirement key for a user."""
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", resource='user')

        streak = db.session.get(UserStreak, user_id)
        return {
            Achievement.REQ_LEVEL: user.current_level or 1,
            Achievement.REQ_TOTAL_XP: user.total_xp or 0,
            Achievement.REQ_STREAK: streak.longest_streak if streak else 0,
            Achievement.REQ_FLASHCARDS_REVIEWED: UserFlashcardProgress.query.filter(
                UserFlashcardProgress.user_id == user_id,
                UserFlashcardProgress.last_reviewed_at.isnot(None),
            ).count(),
            Achievement.REQ_TESTS_GRADED: TestAttempt.query.filter_by(
                student_id=user_id, status='graded'
            ).count(),
            Achievement.REQ_LESSONS_COMPLETED: UserLessonProgress.query.filter_by(user_id=user_id).count(),
        }

    @staticmethod
    def check_and_award(user_id):
        """
        Award every active achievement whose requirements the user now meets.

        Each achievement is awarded at most once; its XP reward goes through
        the XP ledger. Returns the list of newly earned achievements.
        """
        from codequest_app.modules.progression.interface import award_xp

        earned_ids = {row.achievement_id for row in UserAchievement.query.filter_by(user_id=user_id)}
        candidates = [a for a in AchievementService.get_achievements() if a.id not in earned_ids]
        if not candidates:
            return []

        stats = AchievementService.collect_stats(user_id)
        newly_earned = []
        for achievement in candidates:
            if not achievement_rules.is_unlocked(achievement.requirements, stats):
                continue

            earned_at = clock.now()
            db.session.add(UserAchievement(user_id=user_id, achievement_id=achievement.id, earned_at=earned_at))
            try:
                db.session.commit()
            except IntegrityError:
                # Awarded by a concurrent check
                db.session.rollback()
                continue

            current_app.logger.info(f"User {user_id} earned achievement '{achievement.name}'")
            newly_earned.append(achievement)
            achievement_earned.send(None, user_id=user_id, achievement=achievement, earned_at=earned_at)

            if achievement.exp_reward:
                award_xp(
                    user_id,
                    achievement.exp_reward,
                    f"Achievement: {achievement.name}",
                    source_kind='ACHIEVEMENT',
                    source_id=achievement.id,
                )
        return newly_earned

    @staticmethod
    def get_progress(user_id):
        """Every active achievement with the user's progress towards it."""
        stats = AchievementService.collect_stats(user_id)
        earned = {row.achievement_id: row for row in UserAchievement.query.filter_by(user_id=user_id)}
        results = []
        for achievement in AchievementService.get_achievements():
            data = achievement.to_dict()
            row = earned.get(achievement.id)
            data['earned'] = row is not None
            data['earned_at'] = row.earned_at.isoformat() if row else None
            data['progress'] = achievement_rules.progress(achievement.requirements, stats)
            results.append(data)
        return results
