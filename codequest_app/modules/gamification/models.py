from datetime import datetime

from codequest_app.db_instance import db


class Achievement(db.Model):
    """An unlockable achievement and the thresholds it requires."""
    __tablename__ = 'achievements'

    # Keys understood in ``requirements``
    REQ_LEVEL = 'level'
    REQ_TOTAL_XP = 'total_xp'
    REQ_STREAK = 'streak'
    REQ_FLASHCARDS_REVIEWED = 'flashcards_reviewed'
    REQ_TESTS_GRADED = 'tests_graded'
    REQ_LESSONS_COMPLETED = 'lessons_completed'
    REQUIREMENT_KEYS = (
        REQ_LEVEL, REQ_TOTAL_XP, REQ_STREAK, REQ_FLASHCARDS_REVIEWED, REQ_TESTS_GRADED, REQ_LESSONS_COMPLETED,
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.String(255), default='')
    icon = db.Column(db.String(255), nullable=True)
    exp_reward = db.Column(db.Integer, nullable=False, default=0)
    requirements = db.Column(db.JSON, nullable=False, default=dict)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<Achievement {self.name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description or '',
            'icon': self.icon,
            'exp_reward': self.exp_reward,
            'requirements': self.requirements or {},
        }


class UserAchievement(db.Model):
    __tablename__ = 'user_achievements'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    achievement_id = db.Column(
        db.Integer, db.ForeignKey('achievements.id', ondelete='CASCADE'), nullable=False
    )
    earned_at = db.Column(db.DateTime, nullable=False)

    achievement = db.relationship('Achievement')

    __table_args__ = (db.UniqueConstraint('user_id', 'achievement_id', name='uq_user_achievement'),)

    def to_dict(self):
        data = self.achievement.to_dict()
        data['earned_at'] = self.earned_at.isoformat() if self.earned_at else None
        return data


class UserStreak(db.Model):
    __tablename__ = 'user_streaks'

    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), primary_key=True)
    current_streak = db.Column(db.Integer, nullable=False, default=0)
    longest_streak = db.Column(db.Integer, nullable=False, default=0)
    last_activity_date = db.Column(db.Date, nullable=True)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'current_streak': self.current_streak or 0,
            'longest_streak': self.longest_streak or 0,
            'last_activity_date': self.last_activity_date.isoformat() if self.last_activity_date else None,
        }
