"""User model."""

from __future__ import annotations

from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from ..db_instance import db


class User(UserMixin, db.Model):
    """Application user model."""

    __tablename__ = 'users'

    ROLE_ADMIN = 'admin'
    ROLE_TEACHER = 'teacher'
    ROLE_STUDENT = 'student'
    ROLES = (ROLE_ADMIN, ROLE_TEACHER, ROLE_STUDENT)

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    user_role = db.Column(db.String(50), default=ROLE_STUDENT, nullable=False)

    total_xp = db.Column(db.Integer, default=0, nullable=False)
    current_level = db.Column(db.Integer, default=1, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    flashcard_progress = db.relationship(
        'UserFlashcardProgress', backref='user', lazy=True, cascade='all, delete-orphan'
    )
    exp_transactions = db.relationship(
        'ExpTransaction', backref='user', lazy='dynamic', cascade='all, delete-orphan'
    )

    def get_id(self):
        return str(self.user_id)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self) -> bool:
        return self.user_role == self.ROLE_ADMIN

    def to_dict(self) -> dict[str, object]:
        return {
            'user_id': self.user_id,
            'username': self.username,
            'email': self.email,
            'user_role': self.user_role,
            'total_xp': self.total_xp or 0,
            'current_level': self.current_level or 1,
        }
