"""
Notification Service
Stores in-app notifications and exposes them to their owner.
"""
from flask import current_app

from codequest_app.core import clock
from codequest_app.core.error_handlers import NotFoundError
from codequest_app.db_instance import db
from ..logics import payloads
from ..models import Notification


class NotificationService:

    @staticmethod
    def create_notification(user_id, title, message, type=Notification.TYPE_SYSTEM, meta_data=None):
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            meta_data=meta_data,
            is_read=False,
            created_at=clock.now(),
        )
        db.session.add(notification)
        db.session.commit()
        current_app.logger.info(f"Notification {notification.id} ({type}) queued for user {user_id}")
        return notification

    @staticmethod
    def notify_achievement(user_id, achievement):
        payload = payloads.achievement_payload(
            achievement.name,
            achievement.description,
            achievement.icon,
            achievement.exp_reward,
            current_app.config.get('ICON_BASE_URL', '/'),
        )
        payload['achievement_id'] = achievement.id
        return NotificationService.create_notification(
            user_id,
            title='Achievement unlocked',
            message=payload['message'],
            type=Notification.TYPE_ACHIEVEMENT,
            meta_data=payload,
        )

    @staticmethod
    def notify_level_up(user_id, level_number, level=None):
        base_url = current_app.config.get('ICON_BASE_URL', '/')
        if level is not None:
            payload = payloads.level_up_payload(
                level.level_number, level.name, level.description, level.icon, level.exp_required, base_url
            )
        else:
            payload = payloads.level_up_payload(level_number, f'Level {level_number}', '', None, 0, base_url)
        return NotificationService.create_notification(
            user_id,
            title='Level up!',
            message=payload['message'],
            type=Notification.TYPE_LEVEL_UP,
            meta_data=payload,
        )

    @staticmethod
    def get_notifications(user_id, unread_only=False, limit=50):
        query = Notification.query.filter_by(user_id=user_id)
        if unread_only:
            query = query.filter_by(is_read=False)
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    @staticmethod
    def unread_count(user_id):
        return Notification.query.filter_by(user_id=user_id, is_read=False).count()

    @staticmethod
    def mark_read(user_id, notification_id):
        notification = Notification.query.filter_by(id=notification_id, user_id=user_id).first()
        if notification is None:
            raise NotFoundError(f"Notification {notification_id} not found", resource='notification')
        notification.is_read = True
        db.session.commit()
        return notification
