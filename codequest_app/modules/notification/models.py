from datetime import datetime

from codequest_app.db_instance import db


class Notification(db.Model):
    """In-app notification; rows are the outbound queue read by push channels."""
    __tablename__ = 'notifications'

    TYPE_SYSTEM = 'SYSTEM'
    TYPE_ACHIEVEMENT = 'ACHIEVEMENT'
    TYPE_LEVEL_UP = 'LEVEL_UP'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)

    type = db.Column(db.String(50), default=TYPE_SYSTEM)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text)

    is_read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    # Event payload: icon_url, name, description, exp_reward, ...
    meta_data = db.Column(db.JSON, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'message': self.message,
            'is_read': self.is_read,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'meta_data': self.meta_data
        }
