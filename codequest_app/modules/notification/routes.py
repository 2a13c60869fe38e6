from flask import request
from flask_login import current_user, login_required

from codequest_app.core.error_handlers import success_response
from . import notification_api_bp
from .services.notification_service import NotificationService


@notification_api_bp.route('', methods=['GET'])
@login_required
def list_notifications():
    unread_only = request.args.get('unread', 0, type=int) == 1
    limit = request.args.get('limit', 50, type=int)
    notifications = NotificationService.get_notifications(current_user.user_id, unread_only, max(1, limit))
    return success_response({
        'notifications': [n.to_dict() for n in notifications],
        'unread_count': NotificationService.unread_count(current_user.user_id),
    })


@notification_api_bp.route('/<int:notification_id>/read', methods=['POST'])
@login_required
def mark_read(notification_id):
    notification = NotificationService.mark_read(current_user.user_id, notification_id)
    return success_response(notification.to_dict())
