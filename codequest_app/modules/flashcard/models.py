from datetime import datetime

from codequest_app.db_instance import db


class Flashcard(db.Model):
    __tablename__ = 'flashcards'

    id = db.Column(db.Integer, primary_key=True)
    lesson_id = db.Column(db.Integer, db.ForeignKey('lessons.id', ondelete='SET NULL'), nullable=True, index=True)
    front = db.Column(db.Text, nullable=False)
    back = db.Column(db.Text, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='SET NULL'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    progress = db.relationship(
        'UserFlashcardProgress', backref='flashcard', lazy='dynamic', cascade='all, delete-orphan'
    )

    def to_dict(self):
        return {
            'id': self.id,
            'lesson_id': self.lesson_id,
            'front': self.front,
            'back': self.back,
            'created_by': self.created_by,
        }


class UserFlashcardProgress(db.Model):
    """
    SM-2 scheduling state of one flashcard for one user.
    ease_factor is stored in centiunits (250 == 2.5).
    """
    __tablename__ = 'user_flashcard_progress'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    flashcard_id = db.Column(db.Integer, db.ForeignKey('flashcards.id', ondelete='CASCADE'), nullable=False, index=True)

    ease_factor = db.Column(db.Integer, nullable=False, default=250)
    interval = db.Column(db.Integer, nullable=False, default=1)  # days
    repetitions = db.Column(db.Integer, nullable=False, default=0)

    next_review_at = db.Column(db.DateTime, nullable=False, index=True)
    last_reviewed_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'flashcard_id', name='uq_user_flashcard_progress'),
    )

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'flashcard_id': self.flashcard_id,
            'ease_factor': self.ease_factor,
            'interval': self.interval,
            'repetitions': self.repetitions,
            'next_review_at': self.next_review_at.isoformat() if self.next_review_at else None,
            'last_reviewed_at': self.last_reviewed_at.isoformat() if self.last_reviewed_at else None,
        }
