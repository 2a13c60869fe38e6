"""
Event Handlers for Notification Module.

Turns level-up and achievement events into in-app notifications. No other
module imports NotificationService directly.
"""
from flask import current_app

from codequest_app.core.signals import achievement_earned, level_up
from codequest_app.db_instance import db


@achievement_earned.connect
def on_achievement_earned(sender, **kwargs):
    """
    Expected kwargs:
        - user_id: int
        - achievement: Achievement
        - earned_at: datetime
    """
    from .services.notification_service import NotificationService

    user_id = kwargs.get('user_id')
    achievement = kwargs.get('achievement')
    if not user_id or achievement is None:
        return

    try:
        NotificationService.notify_achievement(user_id, achievement)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"[Notification] Error creating achievement notification: {e}", exc_info=True)


@level_up.connect
def on_level_up(sender, **kwargs):
    """
    Expected kwargs:
        - user_id: int
        - old_level: int
        - new_level: int
        - level: Level or None
    """
    from .services.notification_service import NotificationService

    user_id = kwargs.get('user_id')
    new_level = kwargs.get('new_level')
    if not user_id or not new_level:
        return

    try:
        NotificationService.notify_level_up(user_id, new_level, kwargs.get('level'))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"[Notification] Error creating level-up notification: {e}", exc_info=True)
