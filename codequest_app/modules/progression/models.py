from datetime import datetime

from codequest_app.db_instance import db


class Level(db.Model):
    """Reference row: cumulative XP needed to reach a level."""
    __tablename__ = 'levels'

    level_id = db.Column(db.Integer, primary_key=True)
    level_number = db.Column(db.Integer, unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), default='')
    icon = db.Column(db.String(255), nullable=True)
    exp_required = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.CheckConstraint('level_number >= 1', name='ck_level_number_positive'),
    )

    def __repr__(self):
        return f'<Level {self.level_number} {self.name}>'

    def to_dict(self):
        return {
            'level_number': self.level_number,
            'name': self.name,
            'description': self.description or '',
            'icon': self.icon,
            'exp_required': self.exp_required,
        }


class ExpTransaction(db.Model):
    """XP ledger: one row per award."""
    __tablename__ = 'exp_transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    amount = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(255), nullable=False)

    # Source reference: kind is e.g. FLASHCARD_REVIEW, TEST_ATTEMPT, ACHIEVEMENT
    source_kind = db.Column(db.String(50), nullable=True)
    source_id = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'amount': self.amount,
            'description': self.description,
            'source_kind': self.source_kind,
            'source_id': self.source_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
